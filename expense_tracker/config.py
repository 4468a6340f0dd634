"""Configuration management for the expense tracker.

This module centralizes configuration values including storage paths,
the advice-service settings, and environment variable overrides.  A
``.env`` file in the project root is loaded on import so the API key
can live outside the shell environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Base project root - assumes this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

load_dotenv(_PROJECT_ROOT / ".env")

# Data directories
DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))

# Key-value blob store holding the serialized expense list
STORAGE_PATH = Path(
    os.getenv("EXPENSE_TRACKER_STORAGE_PATH", DATA_DIR / "expenses.json")
).resolve()
STORAGE_KEY = "expense_tracker_expenses"

# Text-generation service
ADVICE_API_URL = os.getenv("ADVICE_API_URL", "https://api.openai.com/v1/chat/completions")
ADVICE_MODEL = os.getenv("ADVICE_MODEL", "gpt-3.5-turbo")
ADVICE_MAX_TOKENS = 300
ADVICE_TEMPERATURE = 0.7
ADVICE_TIMEOUT = float(os.getenv("ADVICE_TIMEOUT", "30"))

# Display
CURRENCY_PREFIX = "Rs."

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def ensure_data_directories() -> None:
    """Create the data directory if it doesn't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    STORAGE_PATH.parent.mkdir(parents=True, exist_ok=True)


def get_api_key() -> Optional[str]:
    """Return the advice-service API key, or ``None`` when not configured.

    Read at call time so a key added to the environment after import is
    picked up on the next refresh.  ``VITE_OPENAI_API_KEY`` is accepted
    for ``.env`` files carried over from the browser client.
    """
    key = os.getenv("OPENAI_API_KEY") or os.getenv("VITE_OPENAI_API_KEY")
    if key is None or not key.strip():
        return None
    return key.strip()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the app."""
    level_name = (level or os.getenv("EXPENSE_TRACKER_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
