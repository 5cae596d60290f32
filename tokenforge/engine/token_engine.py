"""Token signing, verification, and untrusted decoding over a signing backend."""

from collections.abc import Awaitable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from tokenforge.backends.base import SigningBackend
from tokenforge.backends.local import LocalSigningBackend
from tokenforge.claims.builder import TIME_CLAIMS, Timestamp, build_time_claims, to_epoch_ms
from tokenforge.claims.validator import (
    ClockContext,
    ValidationHook,
    check_required_claims,
    check_time_claim_shape,
    run_validation_hook,
    validate_claims,
)
from tokenforge.core.durations import DurationParser, parse_duration
from tokenforge.core.errors import (
    BadConfigError,
    ClaimError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenError,
    UnknownError,
)
from tokenforge.core.logging import get_logger
from tokenforge.core.settings import TokenSettings
from tokenforge.crypto.algorithms import Algorithm, parse_algorithm
from tokenforge.crypto.codec import decode_signature, decode_token, encode_header_payload, encode_token
from tokenforge.crypto.types import ClaimRequirements, DecodedToken, SecretCredentials, TokenHeader

logger = get_logger(__name__)

T = TypeVar("T")


class TokenEngine:
    """Signs and verifies compact tokens with a single signing backend.

    ``claims_schema`` is an optional pydantic model that application claims
    must satisfy on sign, verify, and decode. ``required_claims`` pins
    ``iss``/``sub``/``aud``/``jti`` literals for sign and verify.
    """

    def __init__(
        self,
        backend: SigningBackend,
        *,
        claims_schema: type[BaseModel] | None = None,
        required_claims: ClaimRequirements | None = None,
        settings: TokenSettings | None = None,
        parse_duration: DurationParser = parse_duration,
    ) -> None:
        self._backend = backend
        self._claims_schema = claims_schema
        self._required = required_claims or ClaimRequirements()
        self._settings = settings or TokenSettings()
        self._parse_duration = parse_duration

    @classmethod
    def from_settings(cls, settings: TokenSettings | None = None, **kwargs: Any) -> "TokenEngine":
        """Build an HS engine over a local backend from ``TOKENFORGE_*`` settings."""
        settings = settings or TokenSettings()
        if settings.secret is None:
            raise BadConfigError("TOKENFORGE_SECRET must be set to build an engine from settings")
        backend = LocalSigningBackend(
            settings.algorithms,
            secret=SecretCredentials(
                secret=settings.secret.get_secret_value(),
                encoding=settings.secret_encoding,
            ),
        )
        return cls(backend, settings=settings, **kwargs)

    @property
    def backend(self) -> SigningBackend:
        return self._backend

    def _enabled_algorithm(self, value: Algorithm | str) -> Algorithm:
        algorithm = parse_algorithm(value)
        if algorithm is None or not self._backend.is_enabled(algorithm):
            enabled = ", ".join(sorted(self._backend.enabled_algorithms))
            raise BadConfigError(f"Algorithm {value} is not enabled. Enabled algorithms: {enabled}")
        return algorithm

    def _parse_claims(self, claims: Mapping[str, Any]) -> BaseModel | None:
        """Validate application claims; reserved time claims are never passed to the schema."""
        if self._claims_schema is None:
            return None
        app_claims = {name: value for name, value in claims.items() if name not in TIME_CLAIMS}
        try:
            return self._claims_schema.model_validate(app_claims)
        except ValidationError as exc:
            raise ClaimError.from_validation_error("Claims do not match the declared schema", exc) from exc

    async def sign(
        self,
        algorithm: Algorithm | str,
        claims: Mapping[str, Any] | None = None,
        timestamp: Timestamp | None = None,
    ) -> str:
        """Create a signed token.

        ``iat``, ``nbf`` and ``exp`` in ``claims`` are offsets (milliseconds
        or duration strings) from ``timestamp``, not absolute times.
        """
        alg = self._enabled_algorithm(algorithm)
        header = TokenHeader(alg=alg).model_dump(mode="json")

        claims = dict(claims or {})
        offsets = {name: claims.pop(name) for name in TIME_CLAIMS if name in claims}
        time_claims = build_time_claims(
            to_epoch_ms(timestamp),
            **offsets,
            default_expiry_ms=self._settings.default_expiry_ms,
            parse_duration=self._parse_duration,
        )

        parsed = self._parse_claims(claims)
        app_claims = claims if parsed is None else parsed.model_dump(mode="json", exclude_none=True)
        violations = check_required_claims(app_claims, self._required)
        if violations:
            raise ClaimError("Claims do not satisfy the required values", violations)

        try:
            header_payload = encode_header_payload(header, {**app_claims, **time_claims})
        except (TypeError, ValueError) as exc:
            raise ClaimError("Claims are not JSON serializable", cause=exc) from exc

        signature = await self._call_backend(
            self._backend.generate_signature(header_payload, alg), alg, "signing"
        )
        logger.info("token_signed", algorithm=str(alg))
        return encode_token(header_payload, signature)

    async def verify(
        self,
        token: str,
        *,
        clock_skew: int | str | None = None,
        timestamp: Timestamp | None = None,
        validate: ValidationHook | None = None,
        required_claims: ClaimRequirements | None = None,
    ) -> DecodedToken:
        """Verify the signature, then the claims, then the optional hook."""
        try:
            return await self._verify(token, clock_skew, timestamp, validate, required_claims)
        except TokenError as exc:
            logger.info("token_verification_failed", kind=str(exc.kind), reason=exc.message)
            raise

    async def _verify(
        self,
        token: str,
        clock_skew: int | str | None,
        timestamp: Timestamp | None,
        validate: ValidationHook | None,
        required_claims: ClaimRequirements | None,
    ) -> DecodedToken:
        parts = decode_token(token)
        header = self._parse_header(parts.header)
        alg = self._enabled_algorithm(header.alg)

        try:
            signature = decode_signature(parts.signature)
        except ValueError as exc:
            raise InvalidSignatureError("Token signature is not valid base64url", cause=exc) from exc
        valid = await self._call_backend(
            self._backend.verify_signature(parts.header_payload, signature, alg), alg, "verification"
        )
        if not valid:
            raise InvalidSignatureError("Invalid signature")

        parsed = self._parse_claims(parts.payload)
        clock = ClockContext.build(
            timestamp,
            self._settings.clock_skew if clock_skew is None else clock_skew,
            self._parse_duration,
        )
        validate_claims(parts.payload, clock, self._required.merged_with(required_claims))

        decoded = DecodedToken(header=header, claims=parts.payload, parsed=parsed)
        await run_validation_hook(validate, decoded)
        return decoded

    async def decode(self, token: str, *, validate: ValidationHook | None = None) -> DecodedToken:
        """Decode without checking the signature, time bounds, or required values.

        The result is untrusted. Only the token's shape and the optional hook
        are checked.
        """
        parts = decode_token(token)
        header = self._parse_header(parts.header)
        violations = check_time_claim_shape(parts.payload)
        if violations:
            raise ClaimError("Token claims are malformed", violations)
        parsed = self._parse_claims(parts.payload)

        decoded = DecodedToken(header=header, claims=parts.payload, parsed=parsed)
        await run_validation_hook(validate, decoded)
        return decoded

    @staticmethod
    def _parse_header(header: Mapping[str, Any]) -> TokenHeader:
        try:
            return TokenHeader.model_validate(header)
        except ValidationError as exc:
            raise MalformedTokenError("Token header is invalid", cause=exc) from exc

    async def _call_backend(self, call: Awaitable[T], algorithm: Algorithm, action: str) -> T:
        try:
            return await call
        except TokenError:
            raise
        except Exception as exc:
            raise UnknownError(f"Unexpected backend failure during {action} with {algorithm}", cause=exc) from exc
