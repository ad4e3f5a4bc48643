"""
Centralized application settings using Pydantic.

All environment variables are read once and validated.
Use this instead of scattered os.getenv() calls throughout the codebase.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class ProviderSettings(BaseSettings):
    """Provider configuration source and snapshot caching."""

    PROVIDERS_FILE: Optional[str] = None
    PROVIDER_CACHE_TTL_SECONDS: float = Field(default=300.0, gt=0)
    EXTRACTION_CONCURRENCY: int = Field(default=1, ge=1)
    VERIFY_SSL: bool = True

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}

    @property
    def providers_path(self) -> Optional[Path]:
        """Resolve the provider config file path, if one is configured."""
        if not self.PROVIDERS_FILE or not self.PROVIDERS_FILE.strip():
            return None
        return Path(self.PROVIDERS_FILE.strip()).resolve()


class AppSettings(BaseSettings):
    """General application settings."""

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_provider_settings() -> ProviderSettings:
    return ProviderSettings()


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    return AppSettings()
