"""Global configuration — loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class GenmonSettings(BaseSettings):
    workspace_dir: Path = Path(".genmon")
    db_path: Path = Path(".genmon/genmon.db")
    log_level: str = "INFO"
    seed: int | None = None  # fixed seed makes a whole run replayable

    # Scheduler cadences
    cycle_interval_seconds: float = 5.0
    evolution_interval_seconds: float = 30.0

    # Evolution pressure
    max_population: int = 12
    min_breeding_population: int = 3
    breeding_chance: float = 0.2
    outcome_settle_seconds: float = 120.0  # launch age at which PnL is credited

    # Market data (offline = fallback topics and synthetic sentiment only)
    offline: bool = False
    coingecko_url: str = "https://api.coingecko.com/api/v3"
    dexscreener_url: str = "https://api.dexscreener.com"
    market_timeout_seconds: float = 8.0
    market_topic_limit: int = 10

    # Notifications (empty = disabled)
    notify_webhook_url: str = ""
    notify_timeout_seconds: float = 5.0

    model_config = {"env_prefix": "GENMON_"}


settings = GenmonSettings()
