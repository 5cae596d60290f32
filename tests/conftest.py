"""Shared test fixtures for tokenforge."""

import base64
import os
from collections.abc import Callable

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from tokenforge.backends.local import LocalSigningBackend
from tokenforge.core.settings import TokenSettings
from tokenforge.crypto.algorithms import Algorithm, AlgorithmFamily
from tokenforge.crypto.keys import restrict_to_pss
from tokenforge.crypto.types import KeyPairCredentials, PssParameters, SecretCredentials
from tokenforge.engine.token_engine import TokenEngine

FIXED_TIMESTAMP_MS = 1_700_000_000_000

PemPair = tuple[str, str]


def _pem_pair(private_key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey) -> PemPair:
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_pem, public_pem


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host TOKENFORGE_* variables out of settings under test."""
    for name in list(os.environ):
        if name.startswith("TOKENFORGE_"):
            monkeypatch.delenv(name)


@pytest.fixture(scope="session")
def rsa_keys() -> dict[int, PemPair]:
    """RSA key pairs by modulus length."""
    return {
        size: _pem_pair(rsa.generate_private_key(public_exponent=65537, key_size=size))
        for size in (1024, 2048, 3072, 4096)
    }


@pytest.fixture(scope="session")
def ec_keys() -> dict[str, PemPair]:
    """EC key pairs by curve name."""
    curves = (ec.SECP256R1(), ec.SECP384R1(), ec.SECP521R1(), ec.SECP256K1())
    return {curve.name: _pem_pair(ec.generate_private_key(curve)) for curve in curves}


@pytest.fixture(scope="session")
def key_pairs(rsa_keys: dict[int, PemPair], ec_keys: dict[str, PemPair]) -> dict[Algorithm, KeyPairCredentials]:
    """Minimum-strength credentials for every asymmetric algorithm.

    PS private keys are RSA-PSS keys restricted to the algorithm's digest.
    """
    pairs = {}
    for algorithm in Algorithm:
        if algorithm.family is AlgorithmFamily.HS:
            continue
        if algorithm.family is AlgorithmFamily.ES:
            private_pem, public_pem = ec_keys[algorithm.curve_name]
        else:
            private_pem, public_pem = rsa_keys[algorithm.min_modulus_length]
        if algorithm.family is AlgorithmFamily.PS:
            private_pem = restrict_to_pss(private_pem, PssParameters.for_algorithm(algorithm))
        pairs[algorithm] = KeyPairCredentials(public_key=public_pem, private_key=private_pem)
    return pairs


@pytest.fixture
def make_secret() -> Callable[[int], SecretCredentials]:
    """Build a base64 secret of a given byte length."""

    def _make(length: int) -> SecretCredentials:
        raw = bytes(range(256))[:length] if length <= 256 else os.urandom(length)
        return SecretCredentials(secret=base64.b64encode(raw).decode(), encoding="base64")

    return _make


@pytest.fixture
def secret(make_secret: Callable[[int], SecretCredentials]) -> SecretCredentials:
    """A secret strong enough for HS512."""
    return make_secret(64)


@pytest.fixture
def settings() -> TokenSettings:
    return TokenSettings()


@pytest.fixture
def local_backend(
    secret: SecretCredentials, key_pairs: dict[Algorithm, KeyPairCredentials]
) -> LocalSigningBackend:
    """A local backend with every algorithm enabled."""
    return LocalSigningBackend(list(Algorithm), secret=secret, keys=key_pairs)


@pytest.fixture
def engine(local_backend: LocalSigningBackend, settings: TokenSettings) -> TokenEngine:
    return TokenEngine(local_backend, settings=settings)
