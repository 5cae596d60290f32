"""Error taxonomy raised by token signing, verification, and decoding."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, ValidationError


class ErrorKind(StrEnum):
    """Closed set of failure kinds surfaced by the library."""

    BAD_CONFIG = "bad_config"
    INVALID_KEY_MATERIAL = "invalid_key_material"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED_TOKEN = "malformed_token"
    CLAIM_ERROR = "claim_error"
    SERVICE_EXCEPTION = "service_exception"
    UNKNOWN_ERROR = "unknown_error"


class ClaimViolation(BaseModel):
    """A single field-level claim failure."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    code: str = "invalid"


class TokenError(Exception):
    """Base class for every error raised by tokenforge. Never raised directly."""

    kind: ErrorKind

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return f"[{type(self).__name__}]: {self.message}"


class BadConfigError(TokenError):
    """Caller misconfiguration: unknown provider, disabled or unsupported algorithm."""

    kind = ErrorKind.BAD_CONFIG


class InvalidKeyMaterialError(TokenError):
    """Credentials failed the strength or shape contract for an algorithm."""

    kind = ErrorKind.INVALID_KEY_MATERIAL


class InvalidSignatureError(TokenError):
    """The signature did not match the header and payload."""

    kind = ErrorKind.INVALID_SIGNATURE


class MalformedTokenError(TokenError):
    """The input could not be parsed into a well formed token."""

    kind = ErrorKind.MALFORMED_TOKEN


class ClaimError(TokenError):
    """One or more claims failed time, shape, or requirement checks."""

    kind = ErrorKind.CLAIM_ERROR

    def __init__(
        self,
        message: str,
        violations: list[ClaimViolation] | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.violations = list(violations or [])

    @classmethod
    def from_validation_error(cls, message: str, error: ValidationError) -> "ClaimError":
        """Translate a pydantic ValidationError into field-level violations."""
        violations = [
            ClaimViolation(
                field=".".join(str(part) for part in item["loc"]) or "n/a",
                message=item["msg"],
                code=item["type"],
            )
            for item in error.errors()
        ]
        return cls(message, violations, cause=error)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.violations:
            return base
        details = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        return f"{base} ({details})"


class ServiceError(TokenError):
    """A remote signing dependency failed for reasons unrelated to signature validity."""

    kind = ErrorKind.SERVICE_EXCEPTION


class UnknownError(TokenError):
    """Catch-all wrapper around an unanticipated failure."""

    kind = ErrorKind.UNKNOWN_ERROR
