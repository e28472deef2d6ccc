"""Configuration for the immunization scheduler."""

import os
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

# Find and load .env file
_env_candidates = [
    Path(__file__).parent.parent / ".env",
    Path(__file__).parent.parent / ".env.template",
]

for env_path in _env_candidates:
    if env_path.exists():
        load_dotenv(env_path)
        break


class Config:
    """Immunization scheduler configuration."""

    # --- Reference Date ---
    # ISO date used as "today" for reproducible runs; empty = local calendar date
    SCHEDULE_TODAY: str = os.getenv("SCHEDULE_TODAY", "")

    # --- History Handling ---
    # true: unknown vaccine identifiers raise; false: ignored with a warning
    STRICT_HISTORY: bool = os.getenv("STRICT_HISTORY", "true").lower() == "true"

    # --- Output ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DISPLAY_DATE_FORMAT: str = os.getenv("DISPLAY_DATE_FORMAT", "%m/%d/%Y")

    @classmethod
    def get_today(cls) -> date:
        """Get the reference date (SCHEDULE_TODAY if set, otherwise today)."""
        if cls.SCHEDULE_TODAY:
            return date.fromisoformat(cls.SCHEDULE_TODAY)
        return date.today()

    @classmethod
    def is_strict_history(cls) -> bool:
        """Check if unknown vaccines in history should be rejected."""
        return cls.STRICT_HISTORY


# Module-level convenience instance
config = Config()
