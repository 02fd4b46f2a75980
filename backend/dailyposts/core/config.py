import re
from datetime import timedelta
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """Parse a duration such as "24h", "1h30m", "90s" or a plain number of seconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = value.strip()
    if re.fullmatch(r"\d+(?:\.\d+)?", text):
        return timedelta(seconds=float(text))

    parts = _DURATION_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise ValueError(f"invalid duration: {value!r}")

    return timedelta(seconds=sum(float(n) * _DURATION_UNITS[u] for n, u in parts))


class Settings(BaseSettings):
    app_name: str = "Daily Posts"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = f"sqlite:///{Path(__file__).resolve().parent.parent.parent / 'dailyposts.db'}"
    database_pool_size: int = 10
    database_max_overflow: int = 90
    database_pool_recycle: int = 60  # seconds a connection may live

    # Client session
    jwt_signature: str = "change-me"
    session_expire: timedelta = timedelta(hours=24)

    # Storage
    upload_dir: Path = Path(__file__).resolve().parent.parent.parent / "data"
    default_adapter: str = "PUBLIC"

    # Post calendar
    setup_start: str = "2024-12-01"
    setup_days: int = 24

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "DAILYPOSTS_",
    }

    @field_validator("session_expire", mode="before")
    @classmethod
    def convert_duration(cls, v):
        return parse_duration(v)

    @field_validator("session_expire")
    @classmethod
    def positive_duration(cls, v: timedelta) -> timedelta:
        if v.total_seconds() <= 0:
            raise ValueError("session_expire must be positive")
        return v

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_mysql_url(cls, v: str) -> str:
        """Plain mysql:// URLs default to the PyMySQL driver."""
        if isinstance(v, str) and v.startswith("mysql://"):
            return v.replace("mysql://", "mysql+pymysql://", 1)
        return v
