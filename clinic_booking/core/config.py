from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from the project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    database_ssl: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Slot/appointment business rules
    slot_duration_minutes: int = 60
    default_day_start_hour: int = 8
    default_day_end_hour: int = 17  # exclusive, so last default slot starts at 16:00
    morning_end_hour: int = 12  # AM/PM boundary used by the doctor period filter

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
