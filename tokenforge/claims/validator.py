"""Time-bound and literal checks applied to verified claims."""

import inspect
import math
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from tokenforge.claims.builder import Timestamp, to_epoch_ms
from tokenforge.core.durations import DurationParser, parse_duration
from tokenforge.core.errors import BadConfigError, ClaimError, ClaimViolation
from tokenforge.crypto.types import ClaimRequirements, DecodedToken

ValidationHook = Callable[[DecodedToken], bool | Awaitable[bool]]


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value)


class ClockContext(BaseModel):
    """Reference time and skew tolerance, both in whole seconds."""

    model_config = ConfigDict(frozen=True)

    reference_time: int
    skew_tolerance: int = 0

    @classmethod
    def build(
        cls,
        timestamp: Timestamp | None = None,
        clock_skew: int | float | str | None = None,
        parse: DurationParser = parse_duration,
    ) -> "ClockContext":
        """Floor ``timestamp`` and ``clock_skew`` (ms or duration) to seconds.

        A negative skew narrows the accepted window.
        """
        skew_ms: float = 0
        if isinstance(clock_skew, str):
            try:
                skew_ms = parse(clock_skew)
            except ValueError as exc:
                raise BadConfigError(f"Invalid clock skew {clock_skew!r}", cause=exc) from exc
        elif clock_skew is not None:
            if not _is_number(clock_skew):
                raise BadConfigError("Clock skew must be milliseconds or a duration string")
            skew_ms = clock_skew
        return cls(
            reference_time=to_epoch_ms(timestamp) // 1000,
            skew_tolerance=math.floor(skew_ms / 1000),
        )


def check_time_claim_shape(claims: Mapping[str, Any]) -> list[ClaimViolation]:
    """``iat`` and ``exp`` must be numeric; ``nbf`` must be numeric if present."""
    violations = []
    for name in ("iat", "exp"):
        if not _is_number(claims.get(name)):
            violations.append(
                ClaimViolation(field=name, message=f"{name} must be a number", code="missing_or_invalid")
            )
    if "nbf" in claims and not _is_number(claims["nbf"]):
        violations.append(ClaimViolation(field="nbf", message="nbf must be a number", code="missing_or_invalid"))
    return violations


def check_time_claims(claims: Mapping[str, Any], clock: ClockContext) -> list[ClaimViolation]:
    """Check ``exp`` and ``nbf`` against the clock. ``iat`` is informational."""
    violations = check_time_claim_shape(claims)
    if violations:
        return violations

    now = clock.reference_time
    skew = clock.skew_tolerance
    if claims["exp"] < now - skew:
        violations.append(ClaimViolation(field="exp", message="Token has expired", code="expired"))
    if "nbf" in claims and claims["nbf"] > now + skew:
        violations.append(ClaimViolation(field="nbf", message="Token is not yet valid", code="not_before"))
    return violations


def check_required_claims(
    claims: Mapping[str, Any], requirements: ClaimRequirements | None
) -> list[ClaimViolation]:
    """Every declared literal must be present in ``claims`` with the same value."""
    if requirements is None:
        return []
    violations = []
    for name, expected in requirements.declared().items():
        if name not in claims:
            violations.append(ClaimViolation(field=name, message=f"{name} is required", code="missing"))
        elif claims[name] != expected:
            violations.append(
                ClaimViolation(field=name, message=f"Expected {name} to be {expected!r}", code="literal_mismatch")
            )
    return violations


def validate_claims(
    claims: Mapping[str, Any],
    clock: ClockContext,
    requirements: ClaimRequirements | None = None,
) -> None:
    """Raise a single ClaimError carrying every time and literal violation."""
    violations = check_time_claims(claims, clock) + check_required_claims(claims, requirements)
    if violations:
        raise ClaimError("Claim validation failed", violations)


async def run_validation_hook(hook: ValidationHook | None, decoded: DecodedToken) -> None:
    """Run a caller predicate, sync or async. Only ``True`` passes."""
    if hook is None:
        return
    result = hook(decoded)
    if inspect.isawaitable(result):
        result = await result
    if result is not True:
        raise ClaimError(
            "Claim validation failed via the custom validate function",
            [ClaimViolation(field="n/a", message="User validation", code="custom")],
        )
