"""Configuration settings module."""

from typing import Optional

from dotenv import load_dotenv
from pydantic import ConfigDict, SecretStr
from pydantic_settings import BaseSettings

from multisend.core.constants import (
    DEFAULT_SAFE_VERSION,
    OPENCHAIN_LOOKUP_URL,
    SECRETS_PATH,
)
from multisend.core.utils import singleton


@singleton
class Settings(BaseSettings):
    """Application Settings loaded from environment and secrets file."""

    openchain_lookup_url: str = OPENCHAIN_LOOKUP_URL
    # When set, lookups go through "<base>/api/openchain" instead of OpenChain directly
    openchain_proxy_base_url: Optional[str] = None
    lookup_timeout: float = 10.0
    max_decode_depth: int = 8
    default_safe_version: str = DEFAULT_SAFE_VERSION
    safe_api_key: Optional[SecretStr] = None
    log_level: str = "INFO"

    model_config = ConfigDict(
        env_file=str(SECRETS_PATH),
        env_file_encoding="utf-8",
        env_prefix="MULTISEND_",
        extra="ignore",
    )

    def __init__(self, **values):
        """Initialize Settings and load environment variables."""
        load_dotenv(SECRETS_PATH, override=False)
        super().__init__(**values)

    @property
    def signature_lookup_url(self) -> str:
        """URL queried for selector lookups."""
        if self.openchain_proxy_base_url:
            return f"{self.openchain_proxy_base_url.rstrip('/')}/api/openchain"
        return self.openchain_lookup_url


# Global settings instance
settings = Settings()
