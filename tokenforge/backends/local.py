"""Signing with locally held secrets and PEM keys via ``cryptography``."""

from collections.abc import Iterable, Mapping

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.asymmetric import ec, padding
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from jwt.utils import der_to_raw_signature, raw_to_der_signature

from tokenforge.backends.base import SigningBackend
from tokenforge.core.errors import BadConfigError
from tokenforge.crypto.algorithms import (
    ASYMMETRIC_ALGORITHMS,
    SYMMETRIC_ALGORITHMS,
    Algorithm,
    AlgorithmFamily,
    parse_algorithm,
)
from tokenforge.crypto.encoding import HeaderPayload
from tokenforge.crypto.key_material import (
    validate_key_pair_match,
    validate_private_key_material,
    validate_public_key_material,
    validate_secret_material,
)
from tokenforge.crypto.keys import describe_key, load_private_key, load_public_key
from tokenforge.crypto.types import KeyPairCredentials, SecretCredentials


class _LoadedKeys:
    __slots__ = ("private", "public", "pss")

    def __init__(self, credentials: KeyPairCredentials) -> None:
        self.public = load_public_key(credentials.public_key)
        self.private = None
        self.pss = None
        if credentials.private_key:
            self.private = load_private_key(credentials.private_key)
            self.pss = describe_key(self.private, credentials.private_key).pss


class LocalSigningBackend(SigningBackend):
    """HMAC, RSASSA-PKCS1-v1_5, RSASSA-PSS and ECDSA over in-process keys.

    One secret serves every enabled HS algorithm; each enabled asymmetric
    algorithm needs its own key pair. All material is validated here, so a
    constructed backend never fails on weak credentials later.
    """

    supported_algorithms = frozenset(Algorithm)

    def __init__(
        self,
        algorithms: Iterable[Algorithm | str],
        *,
        secret: SecretCredentials | None = None,
        keys: Mapping[Algorithm | str, KeyPairCredentials] | None = None,
    ) -> None:
        super().__init__(algorithms)
        provided: dict[Algorithm, KeyPairCredentials] = {}
        for name, credentials in (keys or {}).items():
            algorithm = parse_algorithm(name)
            if algorithm is None:
                raise BadConfigError(f"Credentials were provided for an unknown algorithm {name}")
            provided[algorithm] = credentials
        self._secret: bytes | None = None
        self._keys: dict[Algorithm, _LoadedKeys] = {}

        for algorithm in sorted(self.enabled_algorithms & SYMMETRIC_ALGORITHMS):
            if secret is None:
                raise BadConfigError(f"No secret provided for {algorithm}")
            self._secret = validate_secret_material(secret.secret, secret.encoding, algorithm)

        for algorithm in sorted(self.enabled_algorithms & ASYMMETRIC_ALGORITHMS):
            credentials = provided.get(algorithm)
            if credentials is None:
                raise BadConfigError(f"No credentials provided for {algorithm}")
            validate_public_key_material(credentials.public_key, algorithm)
            if credentials.private_key is not None:
                validate_private_key_material(credentials.private_key, algorithm)
                validate_key_pair_match(credentials.private_key, credentials.public_key)
            self._keys[algorithm] = _LoadedKeys(credentials)

    def _private_key(self, algorithm: Algorithm) -> PrivateKeyTypes:
        private = self._keys[algorithm].private
        if private is None:
            raise BadConfigError(f"No private key provided for {algorithm}; the backend can only verify")
        return private

    def _pss_padding(self, algorithm: Algorithm, *, signing: bool) -> padding.PSS:
        # sign with the key's own salt length; verification accepts any salt
        pss = self._keys[algorithm].pss
        salt_length = pss.salt_length if signing and pss is not None else padding.PSS.AUTO
        return padding.PSS(mgf=padding.MGF1(algorithm.hash_algorithm()), salt_length=salt_length)

    async def generate_signature(self, header_payload: HeaderPayload, algorithm: Algorithm) -> bytes:
        data = header_payload.encode("utf-8")
        hash_algorithm = algorithm.hash_algorithm()
        match algorithm.family:
            case AlgorithmFamily.HS:
                mac = hmac.HMAC(self._secret, hash_algorithm)
                mac.update(data)
                return mac.finalize()
            case AlgorithmFamily.RS:
                return self._private_key(algorithm).sign(data, padding.PKCS1v15(), hash_algorithm)
            case AlgorithmFamily.PS:
                return self._private_key(algorithm).sign(
                    data, self._pss_padding(algorithm, signing=True), hash_algorithm
                )
            case AlgorithmFamily.ES:
                ec_key = self._private_key(algorithm)
                der = ec_key.sign(data, ec.ECDSA(hash_algorithm))
                return der_to_raw_signature(der, ec_key.curve)

    async def verify_signature(
        self, header_payload: HeaderPayload, signature: bytes, algorithm: Algorithm
    ) -> bool:
        data = header_payload.encode("utf-8")
        hash_algorithm = algorithm.hash_algorithm()
        try:
            match algorithm.family:
                case AlgorithmFamily.HS:
                    mac = hmac.HMAC(self._secret, hash_algorithm)
                    mac.update(data)
                    mac.verify(signature)
                case AlgorithmFamily.RS:
                    self._keys[algorithm].public.verify(signature, data, padding.PKCS1v15(), hash_algorithm)
                case AlgorithmFamily.PS:
                    self._keys[algorithm].public.verify(
                        signature, data, self._pss_padding(algorithm, signing=False), hash_algorithm
                    )
                case AlgorithmFamily.ES:
                    public = self._keys[algorithm].public
                    der = raw_to_der_signature(signature, public.curve)
                    public.verify(der, data, ec.ECDSA(hash_algorithm))
        except InvalidSignature:
            return False
        except ValueError:
            # raw ECDSA signature of the wrong length for the curve
            return False
        return True
