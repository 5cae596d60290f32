"""Tests for base64url helpers."""

import pytest

from tokenforge.crypto.encoding import (
    Base64Encoded,
    Base64UrlEncoded,
    from_base64,
    from_base64url,
    to_base64url,
)


class TestBase64Url:
    """Tests for unpadded base64url encoding."""

    def test_no_padding_and_url_alphabet(self) -> None:
        encoded = to_base64url(b"\xfb\xff\xfe")
        assert encoded == "-__-"
        assert "=" not in to_base64url(b"a")

    def test_decode_unpadded(self) -> None:
        assert from_base64url(Base64UrlEncoded("YQ")) == b"a"

    def test_strict_rejects_non_canonical(self) -> None:
        # "YR" decodes to the same byte as "YQ" with non-zero padding bits
        assert from_base64url(Base64UrlEncoded("YR")) == b"a"
        with pytest.raises(ValueError):
            from_base64url(Base64UrlEncoded("YR"), strict=True)

    def test_strict_rejects_padding(self) -> None:
        with pytest.raises(ValueError):
            from_base64url(Base64UrlEncoded("YQ=="), strict=True)

    def test_non_ascii_rejected(self) -> None:
        with pytest.raises(ValueError):
            from_base64url(Base64UrlEncoded("é"), strict=True)


class TestBase64:
    """Tests for standard base64 secret decoding."""

    def test_decode(self) -> None:
        assert from_base64(Base64Encoded("c2VjcmV0")) == b"secret"

    def test_invalid_characters(self) -> None:
        with pytest.raises(ValueError):
            from_base64(Base64Encoded("not base64!"))
