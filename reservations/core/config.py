from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Facility Reservations API"
    # Comma-separated origins for CORS. If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # Booking rules
    CANCELLATION_WINDOW_HOURS: int = 24
    SLOT_CONFLICT_MODE: str = "interval"  # interval|slot
    ENFORCE_OPERATING_HOURS: bool = False
    BOOKING_REF_PREFIX: str = "BK"

    @field_validator("SLOT_CONFLICT_MODE", mode="after")
    @classmethod
    def check_conflict_mode(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("interval", "slot"):
            raise ValueError("SLOT_CONFLICT_MODE must be 'interval' or 'slot'")
        return v

    # Celery beat period for confirmed -> completed sweep
    COMPLETION_SWEEP_SECONDS: float = 900.0


settings = Settings()
