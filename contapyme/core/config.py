from __future__ import annotations

import os
from decimal import Decimal
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "ContaPyme"
    ENV: str = "dev"
    DATABASE_URL: str | None = None
    JWT_SECRET: str = "change_me"
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    SENTRY_DSN: str | None = None
    AUDIT_LOG_FILE: str = "storage/audit.log"

    # Filing periods accepted by the F29/F22 calculators (upper bound is current year + 1)
    MIN_FILING_YEAR: int = 2020

    # VAT and provisional monthly payment (PPM)
    VAT_RATE: Decimal = Decimal("0.19")
    PPM_RATE: Decimal = Decimal("0.0025")

    # Payroll rates, all applied to gross pay
    PENSION_RATE: Decimal = Decimal("0.10")
    HEALTH_RATE: Decimal = Decimal("0.07")
    UNEMPLOYMENT_EMPLOYEE_RATE: Decimal = Decimal("0.006")
    UNEMPLOYMENT_EMPLOYER_RATE: Decimal = Decimal("0.024")
    WORK_INJURY_RATE: Decimal = Decimal("0.0077")
    STANDARD_MONTHLY_HOURS: int = 180
    OVERTIME_PREMIUM: Decimal = Decimal("1.5")

    # Optional JSON file adding or overriding yearly UF/UTM values and bracket schedules
    TAX_TABLES_FILE: str | None = None

    @property
    def is_production(self) -> bool:
        """True for ProdSettings and for any ENV spelled as a production alias."""
        return isinstance(self, ProdSettings) or _ENV_TO_SETTINGS.get(self.ENV.lower()) is ProdSettings

    @field_validator("VAT_RATE", "PPM_RATE", "PENSION_RATE", "HEALTH_RATE", mode="after")
    @classmethod
    def _rate_in_unit_interval(cls, v: Decimal) -> Decimal:
        if v < 0 or v >= 1:
            raise ValueError("rates must be in [0, 1)")
        return v

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        # Convert Heroku's postgres:// URL to postgresql://
        if self.DATABASE_URL and self.DATABASE_URL.startswith("postgres://"):
            self.DATABASE_URL = self.DATABASE_URL.replace("postgres://", "postgresql://", 1)

        if self.is_production:
            if not self.DATABASE_URL:
                raise ValueError("Missing required production settings: DATABASE_URL")
            if self.JWT_SECRET == "change_me":
                raise ValueError("Insecure default secrets in production: JWT_SECRET uses default placeholder")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite:///./storage/dev.db"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    DATABASE_URL: str = "sqlite:///:memory:"
    AUDIT_LOG_FILE: str = "storage/test_audit.log"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
