from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    SITE_URL: str = "http://localhost:3000"

    # Flat-file content store (products, orders, subscriptions)
    CONTENT_DIR: str = "content"

    # Stripe
    # Empty defaults keep local/test runs importable; checkout and webhook
    # endpoints report a configuration error until real keys are provided.
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STORE_CURRENCY: str = "usd"
    SHIPPING_COUNTRIES: Annotated[list[str], NoDecode] = ["US", "CA", "GB", "AU"]

    # Admin dashboard auth (tokens are issued by the CMS login)
    ADMIN_JWT_SECRET: str = "test-admin-jwt-secret"
    ADMIN_COOKIE_NAME: str = "admin_token"

    # Rate limiting: memory:// for a single instance, redis://... when scaled out
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("SHIPPING_COUNTRIES", mode="before")
    @classmethod
    def split_countries(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        return [code.strip().upper() for code in v if code and code.strip()]

    @field_validator("SITE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def stripe_test_mode(self) -> bool:
        """Test mode is derived from the secret key, never configured separately."""
        return self.STRIPE_SECRET_KEY.startswith("sk_test_")

    @property
    def products_dir(self) -> Path:
        return Path(self.CONTENT_DIR) / "products"

    @property
    def orders_dir(self) -> Path:
        return Path(self.CONTENT_DIR) / "orders"

    @property
    def subscriptions_dir(self) -> Path:
        return Path(self.CONTENT_DIR) / "subscriptions"


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
