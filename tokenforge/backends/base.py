"""Contract every signing backend implements."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import ClassVar

from tokenforge.core.errors import BadConfigError
from tokenforge.crypto.algorithms import Algorithm, parse_algorithm
from tokenforge.crypto.encoding import HeaderPayload


class SigningBackend(ABC):
    """Produces and checks raw signature bytes over a ``header.payload`` string.

    Subclasses declare ``supported_algorithms``; the caller picks the subset
    to enable. Backends own algorithm-specific wire formats, including the
    DER to JOSE translation for ECDSA. A signature the backend judges invalid
    is reported as ``False``, while transport or service failures raise
    :class:`~tokenforge.core.errors.ServiceError`.
    """

    supported_algorithms: ClassVar[frozenset[Algorithm]]

    def __init__(self, algorithms: Iterable[Algorithm | str]) -> None:
        selected = list(algorithms)
        if not selected:
            raise BadConfigError("At least one algorithm must be enabled")
        enabled = set()
        for value in selected:
            algorithm = parse_algorithm(value)
            if algorithm is None or algorithm not in self.supported_algorithms:
                supported = ", ".join(sorted(self.supported_algorithms))
                raise BadConfigError(
                    f"An unsupported algorithm {value} was supplied. "
                    f"The supported algorithms are: {supported}"
                )
            enabled.add(algorithm)
        self._enabled = frozenset(enabled)

    @property
    def enabled_algorithms(self) -> frozenset[Algorithm]:
        return self._enabled

    def is_enabled(self, algorithm: Algorithm | str) -> bool:
        return parse_algorithm(algorithm) in self._enabled

    @abstractmethod
    async def generate_signature(self, header_payload: HeaderPayload, algorithm: Algorithm) -> bytes:
        """Sign the UTF-8 bytes of ``header_payload``."""

    @abstractmethod
    async def verify_signature(
        self, header_payload: HeaderPayload, signature: bytes, algorithm: Algorithm
    ) -> bool:
        """Return whether ``signature`` matches ``header_payload``."""
