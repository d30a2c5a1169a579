# ============================================================================
# MODULE CONTEXT - DATA CLIENT CONFIGURATION
# ============================================================================
# STATUS: Core Infrastructure - Configuration Management
# PURPOSE: Default endpoints/timeout from the environment and per-client runtime state
# EXPORTS: DataClientSettings, get_data_client_settings, ClientConfiguration
# DEPENDENCIES: pydantic-settings, pydantic
# SOURCE: Environment variables, optional .env file
# PATTERNS: Cached settings singleton, lazily initialized runtime configuration
# ============================================================================

"""
Data Client Configuration Module

Two layers:

1. DataClientSettings (environment):
   Deployment defaults read once from GEODATA_* variables.
   - GEODATA_API_BASE_URL: default API base (default: "/api")
   - GEODATA_TILE_BASE_URL: default tile/media base
     (default: "https://earthengine.googleapis.com")
   - GEODATA_REQUEST_TIMEOUT_MS: default request timeout, 0 = unbounded
   - GEODATA_ORIGIN: origin used to resolve a relative API base

2. ClientConfiguration (runtime):
   The mutable state owned by one DataClient. Starts uninitialized and is
   filled from the settings on the first call to initialize().

Usage:
    from geodata.config import get_data_client_settings

    settings = get_data_client_settings()
    print(settings.api_base_url)
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "/api"
DEFAULT_TILE_BASE_URL = "https://earthengine.googleapis.com"


# ============================================================================
# Environment Settings
# ============================================================================

class DataClientSettings(BaseSettings):
    """
    Deployment defaults for DataClient instances.

    Attributes:
        api_base_url: Base URL used when initialize() is given none
        tile_base_url: Tile/media base URL used when initialize() is given none
        request_timeout_ms: Initial request timeout in milliseconds (0 = no limit)
        origin: Scheme and host used to resolve a relative api_base_url
    """

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Default (possibly proxied) API endpoint"
    )
    tile_base_url: str = Field(
        default=DEFAULT_TILE_BASE_URL,
        description="Default tile and media endpoint"
    )
    request_timeout_ms: int = Field(
        default=0,
        ge=0,
        description="Request timeout in milliseconds, 0 means no limit"
    )
    origin: Optional[str] = Field(
        default=None,
        description="Origin for relative API base URLs, e.g. https://example.org"
    )

    model_config = SettingsConfigDict(
        env_prefix="GEODATA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_data_client_settings() -> DataClientSettings:
    """
    Get singleton settings instance.

    Returns:
        DataClientSettings: Validated settings

    Raises:
        ValidationError: If an environment variable holds an invalid value
    """
    return DataClientSettings()


# ============================================================================
# Runtime Configuration
# ============================================================================

@dataclass
class ClientConfiguration:
    """
    Runtime configuration of a single DataClient.

    Mutated only through DataClient.initialize(), reset() and set_timeout(),
    all of which hold the client's lock.
    """
    api_base_url: Optional[str] = None
    tile_base_url: Optional[str] = None
    initialized: bool = False
    request_timeout_ms: int = 0

    def apply(
        self,
        settings: DataClientSettings,
        api_base_url: Optional[str] = None,
        tile_base_url: Optional[str] = None
    ) -> None:
        """
        Apply explicit URLs, falling back to settings only on first initialization.

        An explicit URL always replaces the stored one. A missing URL is taken
        from the settings if this configuration was never initialized and is
        otherwise left as is.
        """
        if api_base_url is not None:
            self.api_base_url = api_base_url
        elif not self.initialized:
            self.api_base_url = settings.api_base_url

        if tile_base_url is not None:
            self.tile_base_url = tile_base_url
        elif not self.initialized:
            self.tile_base_url = settings.tile_base_url

        self.initialized = True

    def clear(self) -> None:
        """Forget both base URLs and mark the configuration uninitialized."""
        self.api_base_url = None
        self.tile_base_url = None
        self.initialized = False
