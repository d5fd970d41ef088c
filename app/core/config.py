from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict



class Settings(BaseSettings):
    APP_ENV: str = "dev"
    PORT: int = 8085
    DATABASE_URL: str
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]
    AMOUNT_TOLERANCE: Decimal = Decimal("0.01")
    MIN_DEPOSIT_PERCENTAGE: Decimal = Decimal("30")
    DEFAULT_NUMBER_OF_INSTALLMENTS: int = 3
    INSTALLMENT_INTERVAL_DAYS: int = 30
    AWS_ACCESS_KEY: str | None = None
    AWS_SECRET_KEY: str | None = None
    AWS_REGION: str | None = None
    NOTIFICATION_QUEUE_URL: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


Config = Settings()
