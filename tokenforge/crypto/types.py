"""Type definitions for token headers, credentials, and decoded tokens."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from tokenforge.crypto.algorithms import Algorithm
from tokenforge.crypto.encoding import Base64UrlEncoded, HeaderPayload

TOKEN_TYPE = "JWT"

SecretEncoding = Literal["base64", "hex"]
KeyRole = Literal["private_key", "public_key"]


class TokenHeader(BaseModel):
    """The JOSE header. Field order is the serialized order."""

    model_config = ConfigDict(frozen=True)

    typ: Literal["JWT"] = TOKEN_TYPE
    alg: Algorithm


class SecretCredentials(BaseModel):
    """Shared secret for the HS family, in its declared text encoding."""

    model_config = ConfigDict(frozen=True)

    secret: str
    encoding: SecretEncoding


class PssParameters(BaseModel):
    """RSASSA-PSS restrictions of an RSA-PSS key (RFC 4055 RSASSA-PSS-params)."""

    model_config = ConfigDict(frozen=True)

    hash_algorithm: str
    mgf1_hash_algorithm: str | None
    salt_length: int

    @classmethod
    def for_algorithm(cls, algorithm: Algorithm) -> "PssParameters":
        """Minimum parameters satisfying ``algorithm`` (digest-length salt)."""
        return cls(
            hash_algorithm=algorithm.hash_name,
            mgf1_hash_algorithm=algorithm.hash_name,
            salt_length=algorithm.min_salt_length,
        )


class KeyPairCredentials(BaseModel):
    """PEM key material for one asymmetric algorithm.

    ``private_key`` may be omitted for verify-only deployments. PS private
    keys must be PKCS#8 RSA-PSS keys; their hash and salt restrictions are
    read from the key itself.
    """

    model_config = ConfigDict(frozen=True)

    public_key: str
    private_key: str | None = None


class ClaimRequirements(BaseModel):
    """Literal values that the identity claims must equal when declared."""

    model_config = ConfigDict(frozen=True)

    iss: str | None = None
    sub: str | None = None
    aud: str | None = None
    jti: str | None = None

    def declared(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)

    def merged_with(self, other: "ClaimRequirements | None") -> "ClaimRequirements":
        """Overlay ``other``'s declared values on top of these."""
        if other is None:
            return self
        return self.model_copy(update=other.declared())


class DecodedParts(BaseModel):
    """Raw, unvalidated pieces of a compact token."""

    model_config = ConfigDict(frozen=True)

    header: dict[str, Any]
    payload: dict[str, Any]
    signature: Base64UrlEncoded
    header_payload: HeaderPayload


class DecodedToken(BaseModel):
    """Header and claims returned from verify or decode."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    header: TokenHeader
    claims: dict[str, Any]
    parsed: BaseModel | None = None
