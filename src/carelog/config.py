"""Configuration management for carelog."""

import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.adherence import EmptyTargetPolicy

logger = logging.getLogger(__name__)

CARELOG_HOME = Path(os.environ.get("CARELOG_HOME", Path.home() / "carelog"))
CONFIG_FILE = CARELOG_HOME / "config" / "carelog.conf"
DATA_DIR = CARELOG_HOME / "data"


@dataclass
class Config:
    """carelog configuration."""

    timezone: str = "UTC"
    store_file: str = ""
    max_workers: int = 4
    empty_targets: EmptyTargetPolicy = EmptyTargetPolicy.COMPLETE
    default_days: int = 7

    @property
    def tz(self) -> tzinfo:
        """Timezone whose calendar days bucket events."""
        return ZoneInfo(self.timezone)

    @property
    def store_path(self) -> Path:
        if self.store_file:
            return Path(self.store_file).expanduser()
        return DATA_DIR / "store.json"


def _positive_int(key: str, value: str, default: int) -> int:
    try:
        number = int(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, using {default}")
        return default
    if number < 1:
        logger.warning(f"{key.upper()} must be at least 1, using {default}")
        return default
    return number


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def parse_config(text: str) -> Config:
    """Parse carelog.conf content. Unknown keys are ignored."""
    config = Config()

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                try:
                    ZoneInfo(value)
                    config.timezone = value
                except (ZoneInfoNotFoundError, ValueError):
                    logger.warning(f"Unknown TIMEZONE {value!r}, using {config.timezone}")
            case "store_file":
                config.store_file = value
            case "max_workers":
                config.max_workers = _positive_int(key, value, config.max_workers)
            case "default_days":
                config.default_days = _positive_int(key, value, config.default_days)
            case "empty_targets":
                try:
                    config.empty_targets = EmptyTargetPolicy(value.lower())
                except ValueError:
                    logger.warning(
                        f"Invalid EMPTY_TARGETS value {value!r}, using {config.empty_targets.value}"
                    )

    return config


def load_config() -> Config:
    """Load configuration from carelog.conf file."""
    if not CONFIG_FILE.exists():
        return Config()
    return parse_config(CONFIG_FILE.read_text())
