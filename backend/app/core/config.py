from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./ledger.db"

    # Local calendar used for daybook days and transaction timestamps
    TIMEZONE: str = "Asia/Kolkata"

    # Daybook
    DAYBOOK_FETCH_TIMEOUT_SECONDS: float = 10.0
    DAYBOOK_MAX_RANGE_DAYS: int = 366

    # CORS origins, comma-separated
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    LOG_LEVEL: str = "INFO"

    # PIN verification throttle
    PIN_MAX_ATTEMPTS: int = 5
    PIN_WINDOW_SECONDS: int = 60

    # Exports
    CURRENCY_SYMBOL: str = "Rs."


settings = Settings()
