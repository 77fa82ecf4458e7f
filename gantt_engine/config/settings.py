"""
Configuration settings for the Gantt scheduling engine.
Load configuration from environment variables or a .env file.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)


def _parse_zoom_widths(raw: str) -> dict[str, float]:
    """Parse 'name=px,name=px' into a zoom -> day width mapping."""
    widths = {}
    for item in raw.split(','):
        if '=' not in item:
            continue
        name, value = item.split('=', 1)
        widths[name.strip()] = float(value)
    return widths


class Settings:
    """Application settings loaded from environment variables."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR: Optional[str] = os.getenv('LOG_DIR') or None

    # ============================================================================
    # Gantt chart geometry
    # ============================================================================
    GANTT_DAY_WIDTH_PX = float(os.getenv('GANTT_DAY_WIDTH_PX', '36'))
    GANTT_ZOOM_DAY_WIDTHS = _parse_zoom_widths(
        os.getenv('GANTT_ZOOM_DAY_WIDTHS', 'compact=30,standard=36')
    )

    # ============================================================================
    # Task Store (remote persistence API)
    # ============================================================================
    TASK_STORE_BASE_URL = os.getenv('TASK_STORE_BASE_URL', '')
    TASK_STORE_API_KEY = os.getenv('TASK_STORE_API_KEY', '')
    TASK_STORE_TIMEOUT = int(os.getenv('TASK_STORE_TIMEOUT', '30'))
    TASK_STORE_RETRY_ATTEMPTS = int(os.getenv('TASK_STORE_RETRY_ATTEMPTS', '3'))
    TASK_STORE_RETRY_DELAY = int(os.getenv('TASK_STORE_RETRY_DELAY', '1'))

    @classmethod
    def get_day_width(cls, zoom: Optional[str] = None) -> float:
        """Day width in pixels for a zoom level (default width if unknown)."""
        if zoom and zoom in cls.GANTT_ZOOM_DAY_WIDTHS:
            return cls.GANTT_ZOOM_DAY_WIDTHS[zoom]
        return cls.GANTT_DAY_WIDTH_PX

    @classmethod
    def validate_required_settings(cls) -> list[str]:
        """
        Validate that all required settings are configured.
        Returns list of missing or invalid settings.
        """
        missing = []

        if cls.GANTT_DAY_WIDTH_PX <= 0:
            missing.append('GANTT_DAY_WIDTH_PX')
        for zoom, width in cls.GANTT_ZOOM_DAY_WIDTHS.items():
            if width <= 0:
                missing.append(f'GANTT_ZOOM_DAY_WIDTHS[{zoom}]')

        # The API key is only needed once a remote store is configured
        if cls.TASK_STORE_BASE_URL and not cls.TASK_STORE_API_KEY:
            missing.append('TASK_STORE_API_KEY')

        return missing


# Create settings instance
settings = Settings()
