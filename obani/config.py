"""
Obani Configuration
Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Load .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        _logger.critical(f"{name}={raw!r} is not a number, cannot start.")
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}")


class Config:
    """Application configuration."""

    # Remote API (owns every record)
    API_URL = os.getenv('OBANI_API_URL', 'https://obani-api-new.vercel.app/api').rstrip('/')
    if not API_URL.startswith(('https://', 'http://')):
        _logger.critical(f"OBANI_API_URL={API_URL!r} is not an http(s) URL, cannot start.")
        raise ValueError("OBANI_API_URL must be an http(s) URL")

    # Request timeouts (seconds): (connect, read)
    API_CONNECT_TIMEOUT = _float_env('OBANI_CONNECT_TIMEOUT', '10')
    API_READ_TIMEOUT = _float_env('OBANI_READ_TIMEOUT', '30')

    # Local durable storage (session + filter presets)
    DATA_DIR = Path(os.getenv('OBANI_DATA_DIR', str(Path(__file__).parent.parent / 'data')))

    # Where contacts-<date>.csv/json exports are written
    EXPORT_DIR = Path(os.getenv('OBANI_EXPORT_DIR', '.'))

    # Page sizes used by the list views
    CONTACTS_PAGE_SIZE = int(os.getenv('OBANI_CONTACTS_PAGE_SIZE', '200'))
    ACTIVITY_PAGE_SIZE = int(os.getenv('OBANI_ACTIVITY_PAGE_SIZE', '100'))

    SUGGESTED_LIMIT = int(os.getenv('OBANI_SUGGESTED_LIMIT', '10'))
    AT_RISK_LIMIT = int(os.getenv('OBANI_AT_RISK_LIMIT', '10'))


# Singleton instance
config = Config()
