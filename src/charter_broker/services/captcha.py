"""Bot protection for the public intake forms."""

import hashlib
import logging
from dataclasses import dataclass, field

from charter_broker.adapters.recaptcha_client import CaptchaClient
from charter_broker.domain.errors import ValidationError

logger = logging.getLogger(__name__)

SUSPICIOUS_SCORE = 0.3


@dataclass(frozen=True)
class CaptchaResult:
    """Verdict for one intake submission."""

    success: bool
    score: float | None = None
    action: str | None = None
    errors: list[str] = field(default_factory=list)


def evaluate(
    response: dict[str, object], expected_action: str, threshold: float
) -> CaptchaResult:
    """Apply success, action and score checks to a siteverify response."""
    raw_score = response.get("score")
    score = float(raw_score) if isinstance(raw_score, int | float) else None
    raw_action = response.get("action")
    action = str(raw_action) if raw_action is not None else None
    codes = response.get("error-codes")
    errors = [str(code) for code in codes] if isinstance(codes, list) else []
    if not response.get("success"):
        return CaptchaResult(False, score, action, errors)
    if action and action != expected_action:
        return CaptchaResult(
            False,
            score,
            action,
            [f"Action mismatch: expected '{expected_action}', got '{action}'"],
        )
    if score is not None and score < threshold:
        return CaptchaResult(
            False, score, action, [f"Score too low: {score} < {threshold}"]
        )
    return CaptchaResult(True, score, action)


@dataclass
class CaptchaVerifier:
    """Checks reCAPTCHA tokens; disabled when no client is configured."""

    client: CaptchaClient | None
    score_threshold: float = 0.5

    async def verify(
        self, token: str | None, expected_action: str, remote_ip: str | None
    ) -> CaptchaResult:
        """Return the verdict for a token."""
        if self.client is None:
            return CaptchaResult(True, action=expected_action)
        if not token:
            return CaptchaResult(False, errors=["missing-input-response"])
        try:
            response = await self.client.verify(token, remote_ip)
        except Exception:
            logger.exception("reCAPTCHA verification unavailable, allowing request")
            return CaptchaResult(
                True,
                action=expected_action,
                errors=["Service unavailable - fallback used"],
            )
        result = evaluate(response, expected_action, self.score_threshold)
        if not result.success or (
            result.score is not None and result.score < SUSPICIOUS_SCORE
        ):
            logger.warning(
                "Suspicious reCAPTCHA attempt",
                extra={
                    "remote_ip": remote_ip or "unknown",
                    "token_hash": hashlib.sha256(token.encode()).hexdigest()[:16],
                    "score": result.score,
                    "errors": result.errors,
                },
            )
        return result

    async def ensure_human(
        self, token: str | None, expected_action: str, remote_ip: str | None
    ) -> None:
        """Raise ValidationError unless the token verifies."""
        result = await self.verify(token, expected_action, remote_ip)
        if not result.success:
            raise ValidationError(
                "reCAPTCHA verification failed", details=result.errors
            )
