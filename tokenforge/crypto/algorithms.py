"""Signing algorithm identifiers and their fixed strength requirements."""

from enum import StrEnum

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

_HASHES: dict[int, type[hashes.HashAlgorithm]] = {
    256: hashes.SHA256,
    384: hashes.SHA384,
    512: hashes.SHA512,
}

_CURVES: dict[int, type[ec.EllipticCurve]] = {
    256: ec.SECP256R1,
    384: ec.SECP384R1,
    512: ec.SECP521R1,
}


class AlgorithmFamily(StrEnum):
    """The four supported signature families."""

    HS = "HS"
    RS = "RS"
    PS = "PS"
    ES = "ES"


class Algorithm(StrEnum):
    """JWS algorithm identifier as it appears in the ``alg`` header."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    PS256 = "PS256"
    PS384 = "PS384"
    PS512 = "PS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"

    @property
    def family(self) -> AlgorithmFamily:
        return AlgorithmFamily(self.value[:2])

    @property
    def bits(self) -> int:
        return int(self.value[-3:])

    @property
    def is_symmetric(self) -> bool:
        return self.family is AlgorithmFamily.HS

    @property
    def deterministic(self) -> bool:
        """True when signing identical input twice yields identical bytes."""
        return self.family in (AlgorithmFamily.HS, AlgorithmFamily.RS)

    @property
    def hash_name(self) -> str:
        return f"sha{self.bits}"

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        return _HASHES[self.bits]()

    @property
    def min_secret_bytes(self) -> int:
        return self.bits >> 3

    @property
    def min_modulus_length(self) -> int:
        return self.bits << 3

    @property
    def min_salt_length(self) -> int:
        return self.bits >> 3

    @property
    def curve_name(self) -> str:
        return _CURVES[self.bits].name

    def curve(self) -> ec.EllipticCurve:
        return _CURVES[self.bits]()


SYMMETRIC_ALGORITHMS = frozenset(a for a in Algorithm if a.family is AlgorithmFamily.HS)
RS_ALGORITHMS = frozenset(a for a in Algorithm if a.family is AlgorithmFamily.RS)
PS_ALGORITHMS = frozenset(a for a in Algorithm if a.family is AlgorithmFamily.PS)
ES_ALGORITHMS = frozenset(a for a in Algorithm if a.family is AlgorithmFamily.ES)
ASYMMETRIC_ALGORITHMS = RS_ALGORITHMS | PS_ALGORITHMS | ES_ALGORITHMS


def parse_algorithm(value: str) -> Algorithm | None:
    """Return the Algorithm for ``value`` or None when it is not recognised."""
    try:
        return Algorithm(value)
    except ValueError:
        return None
