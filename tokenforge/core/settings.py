"""Library settings loaded from environment variables."""

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from tokenforge.crypto.algorithms import Algorithm

DEFAULT_EXPIRY_MS = 900_000
DEFAULT_KMS_REGION = "us-east-1"


class TokenSettings(BaseSettings):
    """Engine defaults and the optional locally held HS secret."""

    model_config = SettingsConfigDict(env_prefix="TOKENFORGE_")

    default_expiry_ms: int = DEFAULT_EXPIRY_MS
    clock_skew: int | str = 0
    algorithms: list[Algorithm] = [Algorithm.HS256]
    secret: SecretStr | None = None
    secret_encoding: Literal["base64", "hex"] = "base64"
    log_level: str = "info"
    log_format: Literal["json", "console"] = "json"


class KmsSettings(BaseSettings):
    """AWS KMS connection settings."""

    model_config = SettingsConfigDict(env_prefix="TOKENFORGE_KMS_")

    region: str = DEFAULT_KMS_REGION
    account: str = ""
    endpoint_url: str | None = None
