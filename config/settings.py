from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Durable cache backend
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_BACKEND: str = "redis"  # "redis" | "memory"

    # Upstream credentials, optional at boot and checked per request
    ALCHEMY_API_KEY: str | None = None
    COINGECKO_API_KEY: str | None = None

    # Blob storage for re-hosted token logos
    BLOB_READ_WRITE_TOKEN: str | None = None
    BLOB_API_URL: str = "https://blob.vercel-storage.com"
    BLOB_HOST_SUFFIX: str = "blob.vercel-storage.com"

    # Cache tiers (seconds)
    PRICE_CACHE_TTL_SECONDS: int = 15 * 60
    WALLET_CACHE_TTL_SECONDS: int = 15 * 60
    LOGO_RETRY_INTERVAL_SECONDS: int = 24 * 60 * 60

    # Enrichment
    METADATA_BATCH_SIZE: int = 20
    LOGO_RETRY_CAP: int = 10
    PRICE_SECONDARY_BATCH_SIZE: int = 10

    # Dust thresholds
    MIN_TOKEN_BALANCE: float = 1.0
    MIN_VALUE_USD: float = 0.001

    # Per-source timeouts (seconds)
    BALANCES_TIMEOUT: float = 10.0
    METADATA_TIMEOUT: float = 5.0
    TRUSTWALLET_TIMEOUT: float = 2.0
    ALCHEMY_LOGO_TIMEOUT: float = 5.0
    COINGECKO_LOGO_TIMEOUT: float = 3.0
    PRICE_TIMEOUT: float = 10.0
    IMAGE_DOWNLOAD_TIMEOUT: float = 8.0
    BLOB_TIMEOUT: float = 5.0

    # App
    APP_NAME: str = "Wallet Balances"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev

    @model_validator(mode="after")
    def _wallet_ttl_within_price_ttl(self) -> "Settings":
        # Wallet snapshots embed prices, so they must not outlive them
        if self.WALLET_CACHE_TTL_SECONDS > self.PRICE_CACHE_TTL_SECONDS:
            raise ValueError("WALLET_CACHE_TTL_SECONDS must be <= PRICE_CACHE_TTL_SECONDS")
        return self


settings = Settings()
