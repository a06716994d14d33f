"""Error taxonomy shared by services and the HTTP layer."""


class CharterError(Exception):
    """Base error carrying an HTTP status and a machine-readable code."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, **details: object) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, object]:
        """Return the JSON body rendered for this error."""
        return {"error": self.code, "message": self.message, **self.details}


class ValidationError(CharterError):
    """Malformed or incomplete input."""

    status_code = 400
    code = "validation_error"


class AuthError(CharterError):
    """Missing or invalid admin credentials."""

    status_code = 401
    code = "unauthorized"


class ForbiddenError(AuthError):
    """Authenticated caller is not allowed to act."""

    status_code = 403
    code = "forbidden"


class NotFoundError(CharterError):
    """Referenced entity does not exist."""

    status_code = 404
    code = "not_found"


class InvalidTransitionError(CharterError):
    """Requested status is not reachable from the current one."""

    status_code = 400
    code = "invalid_transition"

    def __init__(
        self, from_status: str, to_status: str, valid_transitions: list[str]
    ) -> None:
        allowed = ", ".join(valid_transitions) or "none"
        super().__init__(
            f"Invalid status transition from {from_status} to {to_status}. "
            f"Valid transitions: {allowed}",
            currentStatus=from_status,
            attemptedStatus=to_status,
            validTransitions=valid_transitions,
        )
        self.from_status = from_status
        self.to_status = to_status
        self.valid_transitions = valid_transitions


class RateLimitError(CharterError):
    """Caller exceeded its request budget."""

    status_code = 429
    code = "rate_limited"


class UpstreamSignatureError(CharterError):
    """Inbound webhook signature did not verify."""

    status_code = 401
    code = "invalid_signature"


class InternalError(CharterError):
    """Unexpected or persistence failure."""
