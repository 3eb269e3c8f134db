import re
from datetime import timedelta
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """
    Parse a token lifetime such as "24h", "7d", "30m" or "3600"
    (plain numbers are seconds).
    """
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "APACE Logistics API"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Either a full URL or the individual MySQL parts
    DATABASE_URL: Optional[str] = None
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 3306
    DATABASE_USER: str = "root"
    DATABASE_PASSWORD: str = ""
    DATABASE_NAME: str = "apace"

    JWT_SECRET: str = "change-me"
    JWT_EXPIRES_IN: str = "24h"
    JWT_REFRESH_SECRET: str = "change-me-too"
    REFRESH_TOKEN_EXPIRES_IN: str = "7d"
    JWT_ALGORITHM: str = "HS256"

    OTP_EXPIRE_MINUTES: int = 15

    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    CORS_ORIGINS: List[str] = ["*"]

    # Seed administrator created by init_db
    ADMIN_FIRST_NAME: str = "System"
    ADMIN_LAST_NAME: str = "Admin"
    ADMIN_EMAIL: str = "admin@apace.local"
    ADMIN_PHONE: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @property
    def access_token_lifetime(self) -> timedelta:
        return parse_duration(self.JWT_EXPIRES_IN)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return parse_duration(self.REFRESH_TOKEN_EXPIRES_IN)


settings = Settings()
