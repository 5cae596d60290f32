"""Compact signed token issuing and verification."""

from tokenforge.backends.base import SigningBackend
from tokenforge.backends.kms import KmsKeyRef, KmsSigningBackend
from tokenforge.backends.local import LocalSigningBackend
from tokenforge.claims.validator import ClockContext
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
from tokenforge.core.logging import configure_logging
from tokenforge.core.settings import KmsSettings, TokenSettings
from tokenforge.crypto.algorithms import Algorithm, AlgorithmFamily
from tokenforge.crypto.keys import restrict_to_pss
from tokenforge.crypto.types import (
    ClaimRequirements,
    DecodedToken,
    KeyPairCredentials,
    PssParameters,
    SecretCredentials,
    TokenHeader,
)
from tokenforge.engine.registry import EngineRegistry
from tokenforge.engine.token_engine import TokenEngine

__all__ = [
    "Algorithm",
    "AlgorithmFamily",
    "BadConfigError",
    "ClaimError",
    "ClaimRequirements",
    "ClaimViolation",
    "ClockContext",
    "DecodedToken",
    "EngineRegistry",
    "ErrorKind",
    "InvalidKeyMaterialError",
    "InvalidSignatureError",
    "KeyPairCredentials",
    "KmsKeyRef",
    "KmsSettings",
    "KmsSigningBackend",
    "LocalSigningBackend",
    "MalformedTokenError",
    "PssParameters",
    "SecretCredentials",
    "ServiceError",
    "SigningBackend",
    "TokenEngine",
    "TokenError",
    "TokenHeader",
    "TokenSettings",
    "UnknownError",
    "configure_logging",
    "restrict_to_pss",
]
