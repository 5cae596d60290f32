"""Named collection of token engines (one per provider)."""

from collections.abc import Mapping
from typing import Any

from tokenforge.core.errors import BadConfigError
from tokenforge.crypto.types import DecodedToken
from tokenforge.engine.token_engine import TokenEngine


class EngineRegistry:
    """Routes sign, verify, and decode calls to an engine by provider name."""

    def __init__(self, engines: Mapping[str, TokenEngine]) -> None:
        self._engines = dict(engines)

    def __contains__(self, name: object) -> bool:
        return name in self._engines

    @property
    def providers(self) -> list[str]:
        return list(self._engines)

    def get(self, name: str) -> TokenEngine:
        engine = self._engines.get(name)
        if engine is None:
            raise BadConfigError(f"Attempted to get provider {name}, but it does not exist")
        return engine

    async def sign(self, provider: str, *args: Any, **kwargs: Any) -> str:
        return await self.get(provider).sign(*args, **kwargs)

    async def verify(self, provider: str, token: str, **kwargs: Any) -> DecodedToken:
        return await self.get(provider).verify(token, **kwargs)

    async def decode(self, provider: str, token: str, **kwargs: Any) -> DecodedToken:
        return await self.get(provider).decode(token, **kwargs)
