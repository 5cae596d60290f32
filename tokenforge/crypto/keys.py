"""PEM key loading and inspection."""

import re
from typing import Any, Literal

from asn1crypto import algos as asn1_algos
from asn1crypto import keys as asn1_keys
from asn1crypto import pem as asn1_pem
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import (
    PrivateKeyTypes,
    PublicKeyTypes,
)
from pydantic import BaseModel, ConfigDict

from tokenforge.crypto.types import PssParameters

PemKind = Literal["private", "public", "secret"]

RSASSA_PSS = "rsassa_pss"

_PEM_LABEL = re.compile(r"^\s*-----BEGIN ([A-Z0-9 ]+)-----")


class KeyLoadError(ValueError):
    """Raised when PEM text cannot be parsed into a key."""


class KeyDetails(BaseModel):
    """Inspectable properties of a loaded key."""

    model_config = ConfigDict(frozen=True)

    kind: str
    modulus_length: int | None = None
    named_curve: str | None = None
    pss: PssParameters | None = None


def pem_kind(text: str) -> PemKind:
    """Classify key text by its PEM label without parsing it.

    Text that is not PEM at all is treated as a shared secret.
    """
    match = _PEM_LABEL.match(text)
    if match is None:
        return "secret"
    if "PRIVATE KEY" in match.group(1):
        return "private"
    return "public"


def load_private_key(pem: str) -> PrivateKeyTypes:
    """Load an unencrypted PEM private key (PKCS#8 or traditional)."""
    try:
        return serialization.load_pem_private_key(pem.encode(), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyLoadError("Unable to load private key") from exc


def load_public_key(pem: str) -> PublicKeyTypes:
    """Load a SubjectPublicKeyInfo or PKCS#1 PEM public key."""
    try:
        return serialization.load_pem_public_key(pem.encode())
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyLoadError("Unable to load public key") from exc


def key_algorithm(pem: str) -> tuple[str | None, Any]:
    """Algorithm name and parameters from the AlgorithmIdentifier of ``pem``.

    Only PKCS#8 and SubjectPublicKeyInfo carry one; traditional PEM labels
    such as ``RSA PRIVATE KEY`` return ``(None, None)``.
    """
    try:
        label, _, der = asn1_pem.unarmor(pem.encode())
        if label == "PRIVATE KEY":
            identifier = asn1_keys.PrivateKeyInfo.load(der)["private_key_algorithm"]
        elif label == "PUBLIC KEY":
            identifier = asn1_keys.PublicKeyInfo.load(der)["algorithm"]
        else:
            return None, None
        return identifier["algorithm"].native, identifier["parameters"]
    except (ValueError, TypeError) as exc:
        raise KeyLoadError("Unable to read the key algorithm identifier") from exc


def _pss_parameters(parameters: Any) -> PssParameters | None:
    # absent parameters mean an unrestricted RSA-PSS key
    if not isinstance(parameters, asn1_algos.RSASSAPSSParams):
        return None
    mask_gen = parameters["mask_gen_algorithm"]
    mgf1_hash = mask_gen["parameters"]["algorithm"].native if mask_gen["algorithm"].native == "mgf1" else None
    return PssParameters(
        hash_algorithm=parameters["hash_algorithm"]["algorithm"].native,
        mgf1_hash_algorithm=mgf1_hash,
        salt_length=parameters["salt_length"].native,
    )


def describe_key(key: PrivateKeyTypes | PublicKeyTypes, pem: str) -> KeyDetails:
    """Report the kind, modulus length, named curve and PSS restrictions of ``key``.

    ``pem`` is the text ``key`` was loaded from. RSA keys whose algorithm
    identifier is id-RSASSA-PSS report ``rsa-pss`` along with the hash,
    MGF1 hash and salt length they are restricted to.
    """
    if isinstance(key, rsa.RSAPrivateKey | rsa.RSAPublicKey):
        name, parameters = key_algorithm(pem)
        if name == RSASSA_PSS:
            return KeyDetails(kind="rsa-pss", modulus_length=key.key_size, pss=_pss_parameters(parameters))
        return KeyDetails(kind="rsa", modulus_length=key.key_size)
    if isinstance(key, ec.EllipticCurvePrivateKey | ec.EllipticCurvePublicKey):
        return KeyDetails(kind="ec", named_curve=key.curve.name)
    return KeyDetails(kind=type(key).__name__.lower())


def restrict_to_pss(private_pem: str, pss: PssParameters) -> str:
    """Re-wrap an RSA private key as a PKCS#8 id-RSASSA-PSS key.

    ``cryptography`` can load RSA-PSS keys but not generate them; this is
    the equivalent of ``openssl genpkey -algorithm RSA-PSS`` with
    ``rsa_pss_keygen_md``, ``rsa_pss_keygen_mgf1_md`` and
    ``rsa_pss_keygen_saltlen`` set.
    """
    private_key = load_private_key(private_pem)
    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise KeyLoadError("Only RSA keys can be restricted to RSASSA-PSS")
    der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    rsa_key = asn1_keys.PrivateKeyInfo.load(der)["private_key"].parsed

    parameters = asn1_algos.RSASSAPSSParams(
        {
            "hash_algorithm": {"algorithm": pss.hash_algorithm},
            "mask_gen_algorithm": {
                "algorithm": "mgf1",
                "parameters": {"algorithm": pss.mgf1_hash_algorithm or pss.hash_algorithm},
            },
            "salt_length": pss.salt_length,
        }
    )
    algorithm = asn1_keys.PrivateKeyAlgorithm()
    algorithm["algorithm"] = asn1_keys.PrivateKeyAlgorithmId(RSASSA_PSS)
    algorithm["parameters"] = parameters

    info = asn1_keys.PrivateKeyInfo()
    info["version"] = 0
    info["private_key_algorithm"] = algorithm
    info["private_key"] = rsa_key
    return asn1_pem.armor("PRIVATE KEY", info.dump()).decode()


def public_key_der(key: PrivateKeyTypes | PublicKeyTypes) -> bytes:
    """DER SubjectPublicKeyInfo of ``key`` (the public half for private keys)."""
    public = key.public_key() if hasattr(key, "private_bytes") else key
    return public.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
