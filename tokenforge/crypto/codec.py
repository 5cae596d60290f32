"""Compact serialization of ``header.payload.signature`` tokens."""

import json
from collections.abc import Mapping
from typing import Any

from tokenforge.core.errors import MalformedTokenError
from tokenforge.crypto.encoding import (
    Base64UrlEncoded,
    HeaderPayload,
    JsonText,
    from_base64url,
    json_to_base64url,
    to_base64url,
)
from tokenforge.crypto.types import DecodedParts

SEGMENT_COUNT = 3


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-finite number {name} is not valid JSON")


def to_json(value: Mapping[str, Any]) -> JsonText:
    """Serialize compactly, preserving key insertion order."""
    return JsonText(
        json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    )


def encode_header_payload(
    header: Mapping[str, Any], payload: Mapping[str, Any]
) -> HeaderPayload:
    """Produce the signing input for ``header`` and ``payload``."""
    encoded_header = json_to_base64url(to_json(header))
    encoded_payload = json_to_base64url(to_json(payload))
    return HeaderPayload(f"{encoded_header}.{encoded_payload}")


def encode_token(header_payload: HeaderPayload, signature: bytes) -> str:
    return f"{header_payload}.{to_base64url(signature)}"


def _decode_segment(segment: str, name: str) -> dict[str, Any]:
    try:
        text = from_base64url(Base64UrlEncoded(segment)).decode("utf-8")
        value = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as exc:
        raise MalformedTokenError(f"Token {name} is not valid base64url JSON", cause=exc) from exc
    if not isinstance(value, dict):
        raise MalformedTokenError(f"Token {name} must be a JSON object")
    return value


def decode_token(token: object) -> DecodedParts:
    """Split and decode a compact token without establishing any trust.

    ``header_payload`` is the original substring of ``token`` so that
    signature checks run over exactly the presented bytes.
    """
    if not isinstance(token, str):
        raise MalformedTokenError("Token must be a string")
    segments = token.split(".")
    if len(segments) != SEGMENT_COUNT:
        raise MalformedTokenError(
            f"Token must have {SEGMENT_COUNT} segments, found {len(segments)}"
        )
    if not all(segments):
        raise MalformedTokenError("Token segments must not be empty")

    encoded_header, encoded_payload, signature = segments
    return DecodedParts(
        header=_decode_segment(encoded_header, "header"),
        payload=_decode_segment(encoded_payload, "payload"),
        signature=Base64UrlEncoded(signature),
        header_payload=HeaderPayload(f"{encoded_header}.{encoded_payload}"),
    )


def decode_signature(segment: Base64UrlEncoded) -> bytes:
    """Strictly decode a signature segment.

    Raises ``ValueError`` for anything but the canonical unpadded encoding.
    """
    return from_base64url(segment, strict=True)
