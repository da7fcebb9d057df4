"""Segment options stored as a JSON file in the user's home directory."""

import json
import logging
import os

logger = logging.getLogger(__name__)

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".rozatime")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

# Option keys
LATITUDE = "latitude"
LONGITUDE = "longitude"
CITY = "city"
COUNTRY = "country"
METHOD = "method"
SCHOOL = "school"
HIDE_OUTSIDE_RAMADAN = "hide_outside_ramadan"
FIRST_ROZA_DATE = "first_roza_date"
HTTP_TIMEOUT = "http_timeout"
TIMEZONE = "timezone"
TEMPLATE = "template"

# 3 = Muslim World League, 0 = Shafi
DEFAULT_METHOD = 3
DEFAULT_SCHOOL = 0
DEFAULT_HTTP_TIMEOUT = 10


def load_options(path: str = None) -> dict:
    """Load saved options, or return an empty dict when none are usable."""
    path = path or CONFIG_FILE
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning(f"Could not read options from {path}: {exc}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {path}: expected a JSON object")
        return {}
    return data


def save_options(options: dict, path: str = None) -> None:
    """Save options to the config file."""
    path = path or CONFIG_FILE
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(options, f, indent=2)


def clear_options(path: str = None) -> None:
    """Remove the saved options file."""
    path = path or CONFIG_FILE
    if os.path.isfile(path):
        os.remove(path)


class Options:
    """
    Read-only typed view over a plain options mapping.

    Every getter takes a default that is returned when the key is missing
    or holds a value of the wrong type.
    """

    def __init__(self, values: dict = None):
        self._values = dict(values or {})

    def get_str(self, key: str, default: str = "") -> str:
        value = self._values.get(key)
        if isinstance(value, str):
            return value
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._values.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return default
        return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self._values.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return default
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "yes", "1", "on"):
                return True
            if lowered in ("false", "no", "0", "off"):
                return False
        return default
