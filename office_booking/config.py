# office_booking/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]  # project root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./office_booking.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 2.0
    events_enabled: bool = True

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24

    api_prefix: str = "/api"
    cors_origins: str = ""
    log_level: str = "INFO"

    default_page_size: int = 10
    max_page_size: int = 100
    default_slot_minutes: int = 60

    # limit=0 disables the check
    rate_limit_public: int = 60
    rate_limit_authenticated: int = 600
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
