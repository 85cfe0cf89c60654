# payroll/core/config.py
import logging
import os
from typing import ClassVar, List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

logger = logging.getLogger(__name__)

DEV_ACCESS_SECRET = "access_dev_secret_change_me"
DEV_REFRESH_SECRET = "refresh_dev_secret_change_me"
DEV_ENVIRONMENTS = {"development", "dev", "local", "test"}


def _default_database_url() -> str:
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    os.makedirs(data_dir, exist_ok=True)
    return os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(data_dir, 'payroll.db')}")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings(BaseModel):
    # Constant, not a pydantic field
    DATA_DIR: ClassVar[str] = os.path.abspath(os.getenv("DATA_DIR", "./data"))

    APP_ENV: str = Field(default_factory=lambda: os.getenv("APP_ENV", "development").strip().lower())
    DATABASE_URL: str = Field(default_factory=_default_database_url)
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default_factory=lambda: _env_bool("RUN_MIGRATIONS_ON_STARTUP", "true"))

    JWT_ACCESS_SECRET: str = Field(default_factory=lambda: os.getenv("JWT_ACCESS_SECRET", DEV_ACCESS_SECRET))
    JWT_REFRESH_SECRET: str = Field(default_factory=lambda: os.getenv("JWT_REFRESH_SECRET", DEV_REFRESH_SECRET))
    JWT_ALGORITHM: str = Field(default_factory=lambda: os.getenv("JWT_ALGORITHM", "HS256"))
    JWT_ACCESS_EXPIRES_SEC: int = Field(default_factory=lambda: int(os.getenv("JWT_ACCESS_EXPIRES_SEC", "900")))
    JWT_REFRESH_EXPIRES_SEC: int = Field(default_factory=lambda: int(os.getenv("JWT_REFRESH_EXPIRES_SEC", str(30 * 24 * 60 * 60))))
    BCRYPT_ROUNDS: int = Field(default_factory=lambda: int(os.getenv("BCRYPT_ROUNDS", "10")))

    API_PREFIX: str = Field(default_factory=lambda: os.getenv("API_PREFIX", "/api"))
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: _env_list("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    )

    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    LOG_FORMAT: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "pretty").lower())

    @property
    def is_development(self) -> bool:
        return self.APP_ENV in DEV_ENVIRONMENTS

    def insecure_secret_reasons(self) -> List[str]:
        reasons = []
        if not self.JWT_ACCESS_SECRET or self.JWT_ACCESS_SECRET == DEV_ACCESS_SECRET:
            reasons.append("JWT_ACCESS_SECRET is empty or uses the development default")
        if not self.JWT_REFRESH_SECRET or self.JWT_REFRESH_SECRET == DEV_REFRESH_SECRET:
            reasons.append("JWT_REFRESH_SECRET is empty or uses the development default")
        if self.JWT_ACCESS_SECRET and self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            reasons.append("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        return reasons

    def check_secrets(self) -> None:
        """Refuse to run outside development with default or shared signing secrets."""
        reasons = self.insecure_secret_reasons()
        if not reasons:
            return
        if not self.is_development:
            raise RuntimeError(f"Insecure token configuration for APP_ENV={self.APP_ENV!r}: " + "; ".join(reasons))
        for reason in reasons:
            logger.warning("Insecure token configuration (allowed in %s): %s", self.APP_ENV, reason)


settings = Settings()
