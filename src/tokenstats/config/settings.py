# src/tokenstats/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables (or a .env file) with validation.

Files that USE this module:
- tokenstats.app (loads settings for server configuration)
- tokenstats.adapters.providers.* (providers use settings for API keys and URLs)
- tokenstats.adapters.storage.* (object stores use settings for paths and tokens)
- tokenstats.adapters.web.* (CORS, rate limits, error detail)
- tokenstats.application.* (services use settings for timings and limits)

Files that this module USES:
- tokenstats.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from pathlib import Path  # Object-oriented filesystem paths
from typing import List, Optional  # Type hints for optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from tokenstats.shared.validators import (
    validate_decimals,  # Validate token decimals exponent
    validate_http_url,  # Validate upstream endpoint URLs
    validate_solana_address,  # Validate mint and wallet addresses
)

PRICE_PROVIDER_NAMES = ("coingecko", "solana_tracker")
STORAGE_BACKENDS = ("local", "vercel_blob")


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Token ---
    token_address: str = Field(
        default="25p2BoNp6qrJH5As6ek6H7Ei495oSkyZd3tGb97sqFmH", alias="TOKEN_ADDRESS"
    )
    founder_wallet: str = Field(
        default="D2y4sbmBuSjLU1hfrZbBCaveCHjk952c9VsGwfxnNNNH", alias="FOUNDER_WALLET"
    )
    burn_wallet: str = Field(
        default="1nc1nerator11111111111111111111111111111111", alias="BURN_WALLET"
    )
    # Used only when an account omits its decimals; unset means such accounts are skipped
    default_token_decimals: Optional[int] = Field(default=None, alias="DEFAULT_TOKEN_DECIMALS")

    # --- Upstream APIs ---
    solana_rpc_endpoints: str = Field(
        default="https://api.mainnet-beta.solana.com", alias="SOLANA_RPC_ENDPOINTS"
    )
    helius_api_key: str = Field(default="", alias="HELIUS_API_KEY")
    helius_rpc_url: str = Field(default="https://mainnet.helius-rpc.com/", alias="HELIUS_RPC_URL")
    price_providers: str = Field(default="coingecko,solana_tracker", alias="PRICE_PROVIDERS")
    coingecko_coin_id: str = Field(default="soba", alias="COINGECKO_COIN_ID")
    coingecko_url: str = Field(
        default="https://api.coingecko.com/api/v3/simple/price", alias="COINGECKO_URL"
    )
    solana_tracker_api_key: str = Field(default="", alias="SOLANA_TRACKER_API_KEY")
    solana_tracker_url: str = Field(
        default="https://data.solanatracker.io/price", alias="SOLANA_TRACKER_URL"
    )

    # --- Timing / retries ---
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)
    fetch_timeout_seconds: float = Field(default=15.0, alias="FETCH_TIMEOUT_SECONDS", gt=0, le=120)
    retry_max_attempts: int = Field(default=3, alias="RETRY_MAX_ATTEMPTS", ge=1, le=10)
    retry_backoff_seconds: float = Field(default=1.0, alias="RETRY_BACKOFF_SECONDS", ge=0)
    retry_backoff_multiplier: float = Field(default=2.0, alias="RETRY_BACKOFF_MULTIPLIER", ge=1.0)
    stats_cache_ttl_seconds: int = Field(default=60, alias="STATS_CACHE_TTL_SECONDS", ge=1, le=86400)
    holder_page_size: int = Field(default=1000, alias="HOLDER_PAGE_SIZE", ge=1, le=1000)
    holder_max_pages: Optional[int] = Field(default=None, alias="HOLDER_MAX_PAGES", ge=1)

    # --- HTTP server ---
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3001, alias="PORT", ge=1, le=65535)
    environment: str = Field(default="development", alias="ENVIRONMENT")
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001", alias="CORS_ORIGINS"
    )
    cors_origin_regex: Optional[str] = Field(
        default=r"https://.*\.vercel\.app", alias="CORS_ORIGIN_REGEX"
    )
    rate_limit_max_requests: int = Field(default=60, alias="RATE_LIMIT_MAX_REQUESTS", ge=1)
    rate_limit_window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS", ge=1)

    # --- Uploads ---
    storage_backend: str = Field(default="local", alias="STORAGE_BACKEND")
    upload_dir: Path = Field(default=Path("./public/uploads"), alias="UPLOAD_DIR")
    upload_url_prefix: str = Field(default="/uploads", alias="UPLOAD_URL_PREFIX")
    upload_max_bytes: int = Field(default=5 * 1024 * 1024, alias="UPLOAD_MAX_BYTES", ge=1)  # 5MB
    upload_allowed_types: str = Field(
        default="image/jpeg,image/png,image/gif,image/webp", alias="UPLOAD_ALLOWED_TYPES"
    )
    blob_read_write_token: str = Field(default="", alias="BLOB_READ_WRITE_TOKEN")
    blob_api_url: str = Field(default="https://blob.vercel-storage.com", alias="BLOB_API_URL")
    meme_index_file: Path = Field(default=Path("./data/memes.json"), alias="MEME_INDEX_FILE")

    # --- Logging (for server deployment) ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    # Computed properties for convenience
    @property
    def rpc_endpoint_list(self) -> List[str]:
        return _split_csv(self.solana_rpc_endpoints)

    @property
    def price_provider_list(self) -> List[str]:
        return _split_csv(self.price_providers)

    @property
    def cors_origins_list(self) -> List[str]:
        return _split_csv(self.cors_origins)

    @property
    def upload_allowed_types_list(self) -> List[str]:
        return [t.lower() for t in _split_csv(self.upload_allowed_types)]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def HELIUS_URL(self) -> str:
        """Helius RPC URL with key."""
        return f"{self.helius_rpc_url}?api-key={self.helius_api_key}"

    @field_validator("token_address", "founder_wallet", "burn_wallet")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Validate Solana address format."""
        if not validate_solana_address(v):
            raise ValueError(f"Invalid Solana address: {v!r}")
        return v

    @field_validator("default_token_decimals")
    @classmethod
    def validate_default_decimals(cls, v: Optional[int]) -> Optional[int]:
        """Validate the optional fallback decimals exponent."""
        if v is not None and not validate_decimals(v):
            raise ValueError("DEFAULT_TOKEN_DECIMALS must be between 0 and 20")
        return v

    @field_validator("solana_rpc_endpoints")
    @classmethod
    def validate_rpc_endpoints(cls, v: str) -> str:
        """Validate that at least one well-formed RPC endpoint is configured."""
        endpoints = _split_csv(v)
        if not endpoints:
            raise ValueError("SOLANA_RPC_ENDPOINTS must list at least one endpoint")
        for endpoint in endpoints:
            if not validate_http_url(endpoint):
                raise ValueError(f"Invalid RPC endpoint URL: {endpoint!r}")
        return v

    @field_validator("price_providers")
    @classmethod
    def validate_price_providers(cls, v: str) -> str:
        """Validate price provider names."""
        names = _split_csv(v)
        if not names:
            raise ValueError("PRICE_PROVIDERS must list at least one provider")
        unknown = [n for n in names if n not in PRICE_PROVIDER_NAMES]
        if unknown:
            raise ValueError(f"Unknown price provider(s): {', '.join(unknown)}")
        return v

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Validate storage backend name."""
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of: {', '.join(STORAGE_BACKENDS)}")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment name."""
        v = v.lower()
        if v not in ["development", "production", "test"]:
            raise ValueError("ENVIRONMENT must be 'development', 'production' or 'test'")
        return v


# Global settings instance
settings = Settings()
