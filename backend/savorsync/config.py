from pydantic_settings import BaseSettings
from functools import lru_cache
import logging


class Settings(BaseSettings):
    # Application
    app_name: str = "SavorSync Analytics"
    debug: bool = False
    log_level: str = "INFO"

    # Labor Rules
    overtime_threshold_hours: float = 8.0  # per shift
    overtime_multiplier: float = 1.5

    # Leaderboards
    default_top_items: int = 5
    default_top_staff: int = 5

    # Performance Tiers (composite score, 0-100)
    tier_platinum: float = 90.0
    tier_gold: float = 80.0
    tier_silver: float = 70.0

    # Profit & Loss
    rent_days_per_month: int = 30

    # Mock Data
    mock_seed: int = 42
    mock_days: int = 90
    tax_rate: float = 0.0875  # 8.75%

    class Config:
        env_file = ".env"
        env_prefix = "SAVORSYNC_"
        extra = "allow"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Configure root logging once at application start-up."""
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
