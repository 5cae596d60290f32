"""Tests for the error taxonomy."""

import pytest
from pydantic import BaseModel, ValidationError

from tokenforge.core.errors import (
    BadConfigError,
    ClaimError,
    ClaimViolation,
    ErrorKind,
    InvalidKeyMaterialError,
    InvalidSignatureError,
    MalformedTokenError,
    ServiceError,
    TokenError,
    UnknownError,
)


class _Claims(BaseModel):
    scope: str
    level: int


class TestErrorKinds:
    """Each error carries its kind and a readable message."""

    @pytest.mark.parametrize(
        ("error_cls", "kind"),
        [
            (BadConfigError, ErrorKind.BAD_CONFIG),
            (InvalidKeyMaterialError, ErrorKind.INVALID_KEY_MATERIAL),
            (InvalidSignatureError, ErrorKind.INVALID_SIGNATURE),
            (MalformedTokenError, ErrorKind.MALFORMED_TOKEN),
            (ClaimError, ErrorKind.CLAIM_ERROR),
            (ServiceError, ErrorKind.SERVICE_EXCEPTION),
            (UnknownError, ErrorKind.UNKNOWN_ERROR),
        ],
    )
    def test_kind(self, error_cls: type[TokenError], kind: ErrorKind) -> None:
        error = error_cls("boom")
        assert isinstance(error, TokenError)
        assert error.kind is kind
        assert error.message == "boom"
        assert str(error) == f"[{error_cls.__name__}]: boom"

    def test_cause_is_kept(self) -> None:
        cause = RuntimeError("underlying")
        error = ServiceError("wrapped", cause=cause)
        assert error.cause is cause


class TestClaimError:
    """Tests for claim violations."""

    def test_str_lists_violations(self) -> None:
        error = ClaimError("Claim validation failed", [ClaimViolation(field="exp", message="Token has expired")])
        assert "exp: Token has expired" in str(error)

    def test_from_validation_error(self) -> None:
        with pytest.raises(ValidationError) as info:
            _Claims.model_validate({"level": "high"})
        error = ClaimError.from_validation_error("bad claims", info.value)
        fields = {v.field for v in error.violations}
        assert fields == {"scope", "level"}
        assert error.cause is info.value
        assert all(v.code for v in error.violations)

    def test_defaults_to_no_violations(self) -> None:
        assert ClaimError("x").violations == []
