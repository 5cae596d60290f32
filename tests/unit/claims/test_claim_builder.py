"""Tests for time claim construction."""

from datetime import UTC, datetime

import pytest

from tokenforge.claims.builder import build_time_claims, resolve_offset, to_epoch_ms
from tokenforge.core.errors import BadConfigError, ClaimError

T = 1_700_000_000_000


class TestBuildTimeClaims:
    """Tests for iat/nbf/exp offsets."""

    def test_defaults(self) -> None:
        claims = build_time_claims(T)
        assert claims == {"iat": 1_700_000_000, "nbf": 1_700_000_000, "exp": 1_700_000_900}

    def test_numeric_offsets_in_milliseconds(self) -> None:
        claims = build_time_claims(T, iat=-1000, nbf=5000, exp=60_000)
        assert claims == {"iat": 1_699_999_999, "nbf": 1_700_000_005, "exp": 1_700_000_060}

    def test_duration_offsets(self) -> None:
        claims = build_time_claims(T, nbf="1m", exp="1h")
        assert claims["nbf"] == 1_700_000_060
        assert claims["exp"] == 1_700_003_600

    def test_floors_to_seconds(self) -> None:
        claims = build_time_claims(T + 999, exp=0)
        assert claims["iat"] == 1_700_000_000
        assert claims["exp"] == 1_700_000_000

    def test_negative_floor(self) -> None:
        assert build_time_claims(T, iat=-1)["iat"] == 1_699_999_999

    def test_custom_default_expiry(self) -> None:
        assert build_time_claims(T, default_expiry_ms=30_000)["exp"] == 1_700_000_030

    def test_injected_parser(self) -> None:
        claims = build_time_claims(T, exp="soon", parse_duration=lambda text: 2000)
        assert claims["exp"] == 1_700_000_002

    def test_invalid_duration(self) -> None:
        with pytest.raises(ClaimError) as info:
            build_time_claims(T, exp="eventually")
        assert info.value.violations[0].field == "exp"

    @pytest.mark.parametrize("offset", [True, None, [1], float("inf")])
    def test_invalid_offset_types(self, offset: object) -> None:
        with pytest.raises(ClaimError):
            resolve_offset("nbf", offset)


class TestToEpochMs:
    """Tests for timestamp conversion."""

    def test_datetime(self) -> None:
        assert to_epoch_ms(datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)) == T

    def test_integer(self) -> None:
        assert to_epoch_ms(T) == T

    def test_none_is_now(self) -> None:
        assert to_epoch_ms(None) > T

    def test_float_is_floored(self) -> None:
        assert to_epoch_ms(T + 0.999) == T
        assert isinstance(to_epoch_ms(float(T)), int)

    @pytest.mark.parametrize("timestamp", ["1700000000000", True, float("nan"), float("inf")])
    def test_rejects_other_values(self, timestamp: object) -> None:
        with pytest.raises(BadConfigError):
            to_epoch_ms(timestamp)
