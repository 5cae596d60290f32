"""Signing with keys held in AWS KMS via ``boto3``."""

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from jwt.utils import der_to_raw_signature, raw_to_der_signature
from pydantic import BaseModel, ConfigDict, model_validator

from tokenforge.backends.base import SigningBackend
from tokenforge.core.errors import BadConfigError, ServiceError
from tokenforge.core.logging import get_logger
from tokenforge.core.settings import KmsSettings
from tokenforge.crypto.algorithms import Algorithm, AlgorithmFamily, parse_algorithm
from tokenforge.crypto.encoding import HeaderPayload

logger = get_logger(__name__)

INVALID_SIGNATURE_CODES = frozenset({"KMSInvalidSignatureException", "KMSInvalidMacException"})

_SIGNING_SPEC_PREFIX: dict[AlgorithmFamily, str] = {
    AlgorithmFamily.RS: "RSASSA_PKCS1_V1_5_SHA_",
    AlgorithmFamily.PS: "RSASSA_PSS_SHA_",
    AlgorithmFamily.ES: "ECDSA_SHA_",
}


class KmsKeyRef(BaseModel):
    """A KMS key addressed by id or by alias (exactly one)."""

    model_config = ConfigDict(frozen=True)

    key_id: str | None = None
    key_alias: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "KmsKeyRef":
        if (self.key_id is None) == (self.key_alias is None):
            raise ValueError("Provide exactly one of key_id or key_alias")
        return self

    def arn(self, region: str, account: str) -> str:
        if self.key_id is not None:
            return f"arn:aws:kms:{region}:{account}:key/{self.key_id}"
        return f"arn:aws:kms:{region}:{account}:alias/{self.key_alias}"


def signing_algorithm_spec(algorithm: Algorithm) -> str:
    """KMS ``SigningAlgorithm`` for an asymmetric algorithm, e.g. ``ECDSA_SHA_256``."""
    return f"{_SIGNING_SPEC_PREFIX[algorithm.family]}{algorithm.bits}"


def mac_algorithm_spec(algorithm: Algorithm) -> str:
    return f"HMAC_SHA_{algorithm.bits}"


class KmsSigningBackend(SigningBackend):
    """All twelve algorithms backed by AWS KMS.

    HS algorithms use ``GenerateMac``/``VerifyMac``; RS, PS and ES use
    ``Sign``/``Verify`` with raw messages. The blocking boto3 client runs in
    a worker thread so calls do not stall the event loop.
    """

    supported_algorithms = frozenset(Algorithm)

    def __init__(
        self,
        algorithms: Iterable[Algorithm | str],
        *,
        keys: Mapping[Algorithm | str, KmsKeyRef],
        settings: KmsSettings | None = None,
        client: Any = None,
    ) -> None:
        super().__init__(algorithms)
        self._settings = settings or KmsSettings()
        if not self._settings.account:
            raise BadConfigError("An AWS account id is required to address KMS keys (TOKENFORGE_KMS_ACCOUNT)")
        refs: dict[Algorithm, KmsKeyRef] = {}
        for name, ref in keys.items():
            algorithm = parse_algorithm(name)
            if algorithm is None:
                raise BadConfigError(f"A KMS key was provided for an unknown algorithm {name}")
            refs[algorithm] = ref

        self._arns: dict[Algorithm, str] = {}
        for algorithm in sorted(self.enabled_algorithms):
            ref = refs.get(algorithm)
            if ref is None:
                raise BadConfigError(f"No credentials provided for {algorithm}")
            self._arns[algorithm] = ref.arn(self._settings.region, self._settings.account)

        self._client = client or boto3.client(
            "kms",
            region_name=self._settings.region,
            endpoint_url=self._settings.endpoint_url,
        )

    def key_arn(self, algorithm: Algorithm) -> str:
        return self._arns[algorithm]

    async def _call(self, operation: str, algorithm: Algorithm, **params: Any) -> dict[str, Any]:
        method = getattr(self._client, operation)
        return await asyncio.to_thread(method, KeyId=self._arns[algorithm], **params)

    def _service_error(self, action: str, algorithm: Algorithm, exc: Exception) -> ServiceError:
        code = exc.response["Error"].get("Code") if isinstance(exc, ClientError) else type(exc).__name__
        logger.error("kms_request_failed", action=action, algorithm=str(algorithm), error_code=code)
        return ServiceError(f"AWS KMS error while {action}", cause=exc)

    async def generate_signature(self, header_payload: HeaderPayload, algorithm: Algorithm) -> bytes:
        message = header_payload.encode("utf-8")
        try:
            if algorithm.is_symmetric:
                response = await self._call(
                    "generate_mac", algorithm, Message=message, MacAlgorithm=mac_algorithm_spec(algorithm)
                )
                field = "Mac"
            else:
                response = await self._call(
                    "sign",
                    algorithm,
                    Message=message,
                    MessageType="RAW",
                    SigningAlgorithm=signing_algorithm_spec(algorithm),
                )
                field = "Signature"
        except (ClientError, BotoCoreError) as exc:
            raise self._service_error("generating signature", algorithm, exc) from exc

        signature = response.get(field)
        if not signature:
            raise ServiceError(f"AWS KMS responded without a {field.lower()}")
        if algorithm.family is AlgorithmFamily.ES:
            return der_to_raw_signature(signature, algorithm.curve())
        return signature

    async def verify_signature(
        self, header_payload: HeaderPayload, signature: bytes, algorithm: Algorithm
    ) -> bool:
        message = header_payload.encode("utf-8")
        if algorithm.family is AlgorithmFamily.ES:
            try:
                signature = raw_to_der_signature(signature, algorithm.curve())
            except ValueError:
                return False

        try:
            if algorithm.is_symmetric:
                response = await self._call(
                    "verify_mac",
                    algorithm,
                    Message=message,
                    Mac=signature,
                    MacAlgorithm=mac_algorithm_spec(algorithm),
                )
                return bool(response.get("MacValid"))
            response = await self._call(
                "verify",
                algorithm,
                Message=message,
                MessageType="RAW",
                Signature=signature,
                SigningAlgorithm=signing_algorithm_spec(algorithm),
            )
            return bool(response.get("SignatureValid"))
        except ClientError as exc:
            if exc.response["Error"].get("Code") in INVALID_SIGNATURE_CODES:
                return False
            raise self._service_error("verifying signature", algorithm, exc) from exc
        except BotoCoreError as exc:
            raise self._service_error("verifying signature", algorithm, exc) from exc
