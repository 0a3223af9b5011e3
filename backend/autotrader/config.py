from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings

from autotrader.constants import TRADINGVIEW_WEBHOOK_IPS


class Settings(BaseSettings):
    # Bitvavo REST API
    bitvavo_api_url: str = "https://api.bitvavo.com/v2"
    bitvavo_window_ms: int = 10000  # Validity window echoed in Bitvavo-Access-Window
    bitvavo_timeout_seconds: float = 30.0

    # AES-256-GCM master key for exchange credentials at rest (base64, 32 bytes)
    encryption_master_key: str = ""

    # Database
    database_url: str = "sqlite+aiosqlite:///./autotrader.db"
    database_echo: bool = False

    # Webhook origins that skip the API key check (comma separated)
    webhook_allowed_ips: str = ",".join(TRADINGVIEW_WEBHOOK_IPS)

    # Security
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    log_level: str = "INFO"

    @field_validator("bitvavo_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are appended as '/balance', '/order', ..."""
        return v.rstrip("/")

    def get_cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def get_webhook_allowed_ips(self) -> List[str]:
        return [ip.strip() for ip in self.webhook_allowed_ips.split(",") if ip.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
