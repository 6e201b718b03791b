"""
Environment-driven settings.

Every value can be overridden with a WHEN2GATHER_* environment variable;
defaults match the room API used in local development.
"""

import os


def get_api_base() -> str:
    """Base URL of the room API (without trailing slash)."""
    return os.getenv("WHEN2GATHER_API_BASE", "http://localhost:9002/api").rstrip("/")


def get_request_timeout() -> float:
    """Seconds to wait for the room API."""
    return float(os.getenv("WHEN2GATHER_REQUEST_TIMEOUT", "10"))


def get_event_title() -> str:
    return os.getenv("WHEN2GATHER_EVENT_TITLE", "GatherEase Event")


def get_event_duration_hours() -> float:
    return float(os.getenv("WHEN2GATHER_EVENT_DURATION_HOURS", "1"))


def get_timezone() -> str:
    """Timezone the slot clock times are interpreted in."""
    return os.getenv("WHEN2GATHER_TIMEZONE", "UTC")


def get_next_best_limit() -> int:
    return int(os.getenv("WHEN2GATHER_NEXT_BEST_LIMIT", "3"))
