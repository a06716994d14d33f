"""Status transition validation."""

from charter_broker.domain.errors import InvalidTransitionError
from charter_broker.domain.statuses import TRANSITION_TABLES, EntityType


def available_transitions(entity_type: EntityType, current_status: str) -> list[str]:
    """Return the statuses reachable from the current one."""
    table = TRANSITION_TABLES[entity_type]
    return list(table.get(current_status, ()))


def is_valid_transition(
    entity_type: EntityType, current_status: str, requested_status: str
) -> bool:
    """Return true when the requested status is a legal next status."""
    return requested_status in available_transitions(entity_type, current_status)


def ensure_transition(
    entity_type: EntityType, current_status: str, requested_status: str
) -> None:
    """Raise InvalidTransitionError unless the transition is legal."""
    if not is_valid_transition(entity_type, current_status, requested_status):
        raise InvalidTransitionError(
            from_status=current_status,
            to_status=requested_status,
            valid_transitions=available_transitions(entity_type, current_status),
        )
