import logging
import warnings

from pydantic_settings import BaseSettings


APP_VERSION = "1.0.0"


class Settings(BaseSettings):
    # Environment
    environment: str = "development"  # development | test | production
    log_level: str = "INFO"

    # Server
    storefront_host: str = "0.0.0.0"
    storefront_port: int = 5000
    public_base_url: str = "http://localhost:5000"

    # Database (sqlite for local dev, postgresql+asyncpg for production)
    database_url: str = "sqlite+aiosqlite:///./data/storefront.db"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Telegram order notifications (disabled unless both are set)
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout_seconds: float = 10.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in {"production", "prod"}


_logger = logging.getLogger("storefront.config")


def validate_security_posture(cfg: Settings) -> None:
    if cfg.cors_origins.strip() == "*":
        if cfg.is_production:
            raise RuntimeError(
                "FATAL: CORS_ORIGINS cannot be '*' in production. "
                "Set explicit trusted origins via the CORS_ORIGINS environment variable."
            )
        warnings.warn(
            "CORS_ORIGINS is set to '*' (allow all). "
            "Configure specific origins for production via the CORS_ORIGINS environment variable.",
            stacklevel=1,
        )

    if cfg.is_production and cfg.database_url.startswith("sqlite"):
        _logger.warning(
            "DATABASE_URL points at SQLite in production; "
            "use postgresql+asyncpg for concurrent writers."
        )

    if bool(cfg.telegram_bot_token) != bool(cfg.telegram_chat_id):
        _logger.warning(
            "Only one of TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID is set; "
            "order notifications stay disabled until both are configured."
        )
