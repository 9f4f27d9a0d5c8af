# utils/config.py
"""
Runtime configuration for the trade assistant.
Values come from the environment (a .env file is loaded if present).
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class TradeConfig:
    """
    Configuration for the remote AI gateway, the batch analysis loop and logging.
    Supports a dedicated key (TRADE_AI_API_KEY) with OPENAI_API_KEY as fallback.
    """

    def __init__(self):
        # Remote gateway
        self.api_key = os.getenv("TRADE_AI_API_KEY") or os.getenv("OPENAI_API_KEY") or ""
        self.base_url = os.getenv("TRADE_AI_BASE_URL") or None
        self.model = os.getenv("TRADE_AI_MODEL", "gpt-4o-mini")
        self.max_tokens = _env_int("TRADE_AI_MAX_TOKENS", 2000)
        self.timeout = _env_float("TRADE_AI_TIMEOUT", 30.0)

        # Batch CSV analysis pacing (seconds between items)
        self.batch_delay_seconds = _env_float("TRADE_BATCH_DELAY_SECONDS", 0.2)

        # Store and logging
        self.seed_sample_data = _env_bool("TRADE_SEED_SAMPLE_DATA", True)
        self.log_level = os.getenv("TRADE_LOG_LEVEL", "INFO").upper()

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


def configure_logging(config: TradeConfig) -> None:
    """Configure root logging once for the application process."""
    level = getattr(logging, config.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
