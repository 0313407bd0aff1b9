from pathlib import Path
from zoneinfo import ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

from qubrain.services.leitner import resolve_timezone

DEV_JWT_SECRET = "qubrain-development-secret-change-me"


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".qubrain" / "data"
    sqlite_filename: str = "qubrain.db"

    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    register_token_ttl_minutes: int = 60
    login_token_ttl_minutes: int = 7 * 24 * 60

    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:5000",
        "https://qubrain.vercel.app",
        "https://qubrain-app.vercel.app",
    ]
    timezone: str = "UTC"  # calendar-day boundaries for stats

    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "info"

    model_config = {"env_prefix": "QUBRAIN_"}

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, value: str) -> str:
        try:
            resolve_timezone(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone: {value!r}")
        return value


settings = Settings()
