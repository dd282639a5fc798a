"""Configuration settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Telegram Bot
    bot_token: str

    # Database
    database_url: str

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Search & Geolocation
    location_cache_ttl_seconds: int = 3600
    default_radius_km: float = 10.0
    search_page_size: int = 12

    # Email delivery (Resend-compatible HTTP API)
    email_api_key: str = ""
    email_api_url: str = "https://api.resend.com"
    email_from: str = "MealDeal <newsletter@mealdeal.app>"
    app_url: str = "http://localhost:3000"

    # Newsletter
    newsletter_batch_size: int = 50
    newsletter_batch_delay_seconds: float = 1.0

    # Admin User IDs (comma-separated)
    admin_telegram_ids: str = ""

    # Logging
    log_level: str = "INFO"

    # Application
    app_name: str = "mealdeal"
    environment: str = "development"

    # Health server
    health_host: str = "127.0.0.1"
    health_port: int = 8000

    @property
    def admin_user_ids(self) -> list[int]:
        """Parse admin user IDs from comma-separated string."""
        if not self.admin_telegram_ids:
            return []
        return [int(uid.strip()) for uid in self.admin_telegram_ids.split(",") if uid.strip()]


def load_settings() -> Settings:
    """Load and validate settings from environment."""
    return Settings()  # type: ignore[call-arg]
