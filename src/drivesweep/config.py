"""User settings for drivesweep."""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DRIVESWEEP_CONFIG"
DEFAULT_CONFIG_FILE = Path("~/.drivesweep/config.json")
MAX_AGE_DAYS = 36_500


class Settings(BaseModel):
    """Persisted preferences. Every key is optional in the file."""

    log_level: str = Field("WARNING", description="Logging level for the CLI")
    downloads_max_age_days: int = Field(
        30, ge=0, le=MAX_AGE_DAYS, description="Age threshold for old downloads"
    )
    large_items_limit: int = Field(200, ge=1, description="Default result cap for the volume sweep")
    large_items_min_size_mb: int = Field(1024, ge=0, description="Default size threshold in MB")
    category_items_limit: int = Field(200, ge=1, description="Default cap for item listings")


def get_config_path() -> Path:
    """Resolve the settings file, honoring the override variable."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(os.path.expanduser(override))
    return Path(os.path.expanduser(str(DEFAULT_CONFIG_FILE)))


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    config_file = path or get_config_path()
    if not config_file.exists():
        return Settings()

    try:
        with open(config_file, encoding="utf-8") as f:
            data = json.load(f)
        return Settings.model_validate(data)
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", config_file, e)
        return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> bool:
    """Save settings to disk."""
    config_file = path or get_config_path()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(settings.model_dump(), f, indent=2)
        return True
    except OSError as e:
        logger.warning("Could not save settings to %s: %s", config_file, e)
        return False
