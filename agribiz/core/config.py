# agribiz/core/config.py
# -----------------------------------------------------------------------------
# Global settings (pydantic-settings v2)
# - reads the .env file and OS environment into a Settings object
# - policy thresholds for the calculators live here, not in the engines
# -----------------------------------------------------------------------------
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # basics
    APP_NAME: str = "Agribiz Advisor"
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite+aiosqlite:///./agribiz.db"

    # logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # summary formatting
    CURRENCY_SYMBOL: str = "Rp"

    # feasibility policy: feasible iff roi > MIN_ROI and payback < MAX_PAYBACK
    FEASIBILITY_MIN_ROI: float = 15.0
    FEASIBILITY_MAX_PAYBACK_YEARS: float = 5.0

    # forecasting
    FORECAST_MIN_HISTORY: int = 3
    FORECAST_DEFAULT_ALPHA: float = 0.3
    FORECAST_DEFAULT_PERIOD_LENGTH: int = 3

    # optimization
    OPTIMIZATION_TOLERANCE: float = 1e-6

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore"  # ignore unknown keys in .env
    )


settings = Settings()
