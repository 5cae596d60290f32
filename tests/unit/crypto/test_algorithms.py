"""Tests for the algorithm table."""

import pytest
from cryptography.hazmat.primitives import hashes

from tokenforge.crypto.algorithms import (
    ASYMMETRIC_ALGORITHMS,
    SYMMETRIC_ALGORITHMS,
    Algorithm,
    AlgorithmFamily,
    parse_algorithm,
)


class TestAlgorithm:
    """Tests for per-algorithm strength requirements."""

    def test_twelve_algorithms(self) -> None:
        assert len(Algorithm) == 12
        assert SYMMETRIC_ALGORITHMS | ASYMMETRIC_ALGORITHMS == frozenset(Algorithm)

    @pytest.mark.parametrize(
        ("algorithm", "modulus", "salt"),
        [
            (Algorithm.PS256, 2048, 32),
            (Algorithm.PS384, 3072, 48),
            (Algorithm.PS512, 4096, 64),
        ],
    )
    def test_rsa_minimums(self, algorithm: Algorithm, modulus: int, salt: int) -> None:
        assert algorithm.min_modulus_length == modulus
        assert algorithm.min_salt_length == salt

    @pytest.mark.parametrize(
        ("algorithm", "curve"),
        [
            (Algorithm.ES256, "secp256r1"),
            (Algorithm.ES384, "secp384r1"),
            (Algorithm.ES512, "secp521r1"),
        ],
    )
    def test_curves(self, algorithm: Algorithm, curve: str) -> None:
        assert algorithm.curve_name == curve
        assert algorithm.curve().name == curve

    def test_secret_minimums(self) -> None:
        assert Algorithm.HS256.min_secret_bytes == 32
        assert Algorithm.HS512.min_secret_bytes == 64

    def test_hash(self) -> None:
        assert isinstance(Algorithm.RS384.hash_algorithm(), hashes.SHA384)
        assert Algorithm.PS512.hash_name == "sha512"

    def test_determinism_by_family(self) -> None:
        assert Algorithm.HS256.deterministic
        assert Algorithm.RS256.deterministic
        assert not Algorithm.PS256.deterministic
        assert not Algorithm.ES256.deterministic

    def test_family(self) -> None:
        assert Algorithm.ES384.family is AlgorithmFamily.ES
        assert Algorithm.HS384.is_symmetric


class TestParseAlgorithm:
    """Tests for parsing alg header values."""

    def test_known(self) -> None:
        assert parse_algorithm("RS256") is Algorithm.RS256

    @pytest.mark.parametrize("value", ["none", "hs256", "EdDSA", ""])
    def test_unknown(self, value: str) -> None:
        assert parse_algorithm(value) is None
