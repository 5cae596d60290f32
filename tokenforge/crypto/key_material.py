"""Strength and shape checks for secrets and PEM key material.

Every check is pure and raises :class:`InvalidKeyMaterialError` with a
message specific to the failure. Backends call these at construction so that
weak or mismatched credentials never reach a signing call.
"""

import binascii

from tokenforge.core.errors import InvalidKeyMaterialError
from tokenforge.core.logging import get_logger
from tokenforge.crypto.algorithms import (
    ASYMMETRIC_ALGORITHMS,
    ES_ALGORITHMS,
    PS_ALGORITHMS,
    RS_ALGORITHMS,
    SYMMETRIC_ALGORITHMS,
    Algorithm,
    AlgorithmFamily,
)
from tokenforge.crypto.encoding import Base64Encoded, from_base64
from tokenforge.crypto.keys import (
    KeyLoadError,
    describe_key,
    load_private_key,
    load_public_key,
    pem_kind,
    public_key_der,
)
from tokenforge.crypto.types import KeyRole

logger = get_logger(__name__)

SECRET_ENCODINGS = ("base64", "hex")

_ROLE_LABEL: dict[str, str] = {"private_key": "private key", "public_key": "public key"}


def _reject(message: str, algorithm: Algorithm | str, role: str | None = None) -> InvalidKeyMaterialError:
    logger.warning("key_material_rejected", algorithm=str(algorithm), role=role, reason=message)
    return InvalidKeyMaterialError(message)


def _require(algorithm: Algorithm, allowed: frozenset[Algorithm], check: str) -> None:
    if algorithm not in allowed:
        names = ", ".join(sorted(allowed))
        raise _reject(
            f"{check} does not apply to {algorithm}. Expected one of {names}", algorithm
        )


def validate_secret_material(secret: str, encoding: str, algorithm: Algorithm) -> bytes:
    """Decode ``secret`` and check it is at least as long as the HMAC digest.

    Returns the decoded key bytes.
    """
    _require(algorithm, SYMMETRIC_ALGORITHMS, "Secret validation")
    if not isinstance(secret, str) or not secret:
        raise _reject("No secret value was provided", algorithm)
    if encoding not in SECRET_ENCODINGS:
        raise _reject(
            f'Secret encoding {encoding!r} is not supported. Expected "base64" or "hex"',
            algorithm,
        )

    try:
        if encoding == "hex":
            key = bytes.fromhex(secret)
        else:
            key = from_base64(Base64Encoded(secret))
    except (ValueError, binascii.Error) as exc:
        raise _reject(f"The secret could not be decoded as {encoding}", algorithm) from exc

    if len(key) < algorithm.min_secret_bytes:
        raise _reject(
            f"The secret is {len(key) << 3} bits but {algorithm} requires at least "
            f"{algorithm.bits} bits. Check that the secret uses the declared encoding",
            algorithm,
        )
    return key


def validate_key_type(algorithm: Algorithm, kind: str | None, role: KeyRole) -> None:
    """PS private keys must be ``rsa-pss``; RS keys must be ``rsa``.

    PS public keys may be either.
    """
    _require(algorithm, ASYMMETRIC_ALGORITHMS, "Key type validation")
    label = _ROLE_LABEL[role]
    if not kind:
        raise _reject(f"Unable to determine the key type of the {label}", algorithm, role)

    match algorithm.family:
        case AlgorithmFamily.RS:
            expected = ("rsa",)
        case AlgorithmFamily.PS:
            expected = ("rsa-pss",) if role == "private_key" else ("rsa", "rsa-pss")
        case _:
            expected = ("ec",)
    if kind not in expected:
        names = " or ".join(f'"{name}"' for name in expected)
        raise _reject(
            f'Invalid {label}. Expected key type {names} but got "{kind}"',
            algorithm,
            role,
        )


def validate_modulus_length(algorithm: Algorithm, modulus_length: int | None, role: KeyRole) -> None:
    _require(algorithm, RS_ALGORITHMS | PS_ALGORITHMS, "Modulus length validation")
    label = _ROLE_LABEL[role]
    if not isinstance(modulus_length, int):
        raise _reject(f"Unable to determine the modulus length of the {label}", algorithm, role)
    if modulus_length < algorithm.min_modulus_length:
        raise _reject(
            f"{algorithm} requires a modulus length of at least {algorithm.min_modulus_length} "
            f"but the {label} has {modulus_length}",
            algorithm,
            role,
        )


def validate_salt_length(algorithm: Algorithm, salt_length: int | None, role: KeyRole) -> None:
    _require(algorithm, PS_ALGORITHMS, "Salt length validation")
    label = _ROLE_LABEL[role]
    if not isinstance(salt_length, int):
        raise _reject(f"Unable to determine the salt length of the {label}", algorithm, role)
    if salt_length < algorithm.min_salt_length:
        raise _reject(
            f"{algorithm} requires a salt length of at least {algorithm.min_salt_length} "
            f"but the {label} has {salt_length}",
            algorithm,
            role,
        )


def validate_hash_algorithm(
    algorithm: Algorithm,
    mgf1_hash_algorithm: str | None,
    hash_algorithm: str | None,
    role: KeyRole,
) -> None:
    """The MGF1 and message digests must agree and match the algorithm."""
    _require(algorithm, PS_ALGORITHMS, "Hash algorithm validation")
    label = _ROLE_LABEL[role]
    if not mgf1_hash_algorithm:
        raise _reject(f"Unable to determine the MGF1 hash algorithm of the {label}", algorithm, role)
    if not hash_algorithm:
        raise _reject(f"Unable to determine the hash algorithm of the {label}", algorithm, role)
    if mgf1_hash_algorithm != hash_algorithm:
        raise _reject(
            f"The MGF1 hash algorithm and the hash algorithm of the {label} do not match",
            algorithm,
            role,
        )
    if hash_algorithm != algorithm.hash_name:
        raise _reject(
            f"The {label} has hash algorithm {hash_algorithm} but {algorithm} "
            f"requires {algorithm.hash_name}",
            algorithm,
            role,
        )


def validate_curve(algorithm: Algorithm, curve: str | None, role: KeyRole) -> None:
    """The named curve must match exactly; a stronger curve is still rejected."""
    _require(algorithm, ES_ALGORITHMS, "Curve validation")
    label = _ROLE_LABEL[role]
    if not curve:
        raise _reject(f"Could not determine the curve of the {label}", algorithm, role)
    if curve != algorithm.curve_name:
        raise _reject(
            f'Invalid curve. Expected "{algorithm.curve_name}" but received "{curve}"',
            algorithm,
            role,
        )


def _check_key_details(algorithm: Algorithm, pem: str, role: KeyRole) -> None:
    label = _ROLE_LABEL[role]
    try:
        key = load_private_key(pem) if role == "private_key" else load_public_key(pem)
        details = describe_key(key, pem)
    except KeyLoadError as exc:
        raise _reject(f"Invalid key material. Unable to inspect the {label}", algorithm, role) from exc

    validate_key_type(algorithm, details.kind, role)
    match algorithm.family:
        case AlgorithmFamily.RS:
            validate_modulus_length(algorithm, details.modulus_length, role)
        case AlgorithmFamily.PS:
            validate_modulus_length(algorithm, details.modulus_length, role)
            # public keys do not carry the signing restrictions
            if role == "private_key":
                pss = details.pss
                validate_salt_length(algorithm, pss.salt_length if pss else None, role)
                validate_hash_algorithm(
                    algorithm,
                    pss.mgf1_hash_algorithm if pss else None,
                    pss.hash_algorithm if pss else None,
                    role,
                )
        case AlgorithmFamily.ES:
            validate_curve(algorithm, details.named_curve, role)


def validate_public_key_material(public_key: str, algorithm: Algorithm) -> None:
    """Check that ``public_key`` is a PEM public key strong enough for ``algorithm``."""
    _require(algorithm, ASYMMETRIC_ALGORITHMS, "Public key validation")
    match pem_kind(public_key):
        case "private":
            raise _reject("A private key was provided where the public key was expected", algorithm, "public_key")
        case "secret":
            raise _reject("A secret was provided where the public key was expected", algorithm, "public_key")
    _check_key_details(algorithm, public_key, "public_key")


def validate_private_key_material(private_key: str, algorithm: Algorithm) -> None:
    """Check that ``private_key`` is a PEM private key strong enough for ``algorithm``.

    PS keys must be RSA-PSS keys restricted to the algorithm's digest (for
    both the message and MGF1) with at least a digest-length salt.
    """
    _require(algorithm, ASYMMETRIC_ALGORITHMS, "Private key validation")
    match pem_kind(private_key):
        case "public":
            raise _reject("A public key was provided where the private key was expected", algorithm, "private_key")
        case "secret":
            raise _reject("A secret was provided where the private key was expected", algorithm, "private_key")
    _check_key_details(algorithm, private_key, "private_key")


def validate_key_pair_match(private_key: str, public_key: str) -> None:
    """The public half of ``private_key`` must equal ``public_key``."""
    try:
        derived = public_key_der(load_private_key(private_key))
        supplied = public_key_der(load_public_key(public_key))
    except KeyLoadError as exc:
        raise _reject("Invalid key material. Unable to compare the key pair", "n/a") from exc
    if derived != supplied:
        raise _reject("The private key does not belong to the supplied public key", "n/a")
