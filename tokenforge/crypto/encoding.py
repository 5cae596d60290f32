"""Branded string types and base64url helpers for the compact serialization."""

import base64
import binascii
from typing import NewType

from jwt.utils import base64url_decode, base64url_encode

Base64UrlEncoded = NewType("Base64UrlEncoded", str)
Base64Encoded = NewType("Base64Encoded", str)
JsonText = NewType("JsonText", str)
# "<base64url header>.<base64url payload>", the exact bytes a signature covers
HeaderPayload = NewType("HeaderPayload", str)


def to_base64url(raw: bytes) -> Base64UrlEncoded:
    """Encode bytes as base64url without padding."""
    return Base64UrlEncoded(base64url_encode(raw).decode("ascii"))


def json_to_base64url(text: JsonText) -> Base64UrlEncoded:
    """Encode a serialized JSON document (UTF-8) as base64url."""
    return to_base64url(text.encode("utf-8"))


def from_base64url(value: Base64UrlEncoded, *, strict: bool = False) -> bytes:
    """Decode a base64url string.

    With ``strict`` the value must be the canonical unpadded encoding of the
    decoded bytes; otherwise ``ValueError`` is raised.
    """
    try:
        raw = base64url_decode(value)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError("Invalid base64url value") from exc
    if strict and to_base64url(raw) != value:
        raise ValueError("Non-canonical base64url value")
    return raw


def from_base64(value: Base64Encoded) -> bytes:
    """Decode a standard (padded) base64 string."""
    return base64.b64decode(value, validate=True)
