"""Plugin settings loaded from YAML with environment overrides."""
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from wocker_storage.core.errors import ValidationError
from wocker_storage.core.logger import get_logger

logger = get_logger(__name__)

# Default settings search paths (ordered by proximity to current run)
SETTINGS_PATHS = [
    "./wocker-storage.yml",
    str(Path.home() / ".config" / "wocker-storage" / "settings.yml"),
]

DEFAULT_DATA_DIR = str(Path.home() / ".wocker" / "plugins" / "storage")
CONFIG_FILE_NAME = "config.json"


class Settings(BaseModel):
    """Where the storage config lives and how to reach docker."""

    model_config = ConfigDict(extra='forbid')

    data_dir: str = Field(DEFAULT_DATA_DIR, description="Directory holding config.json")
    docker_context: Optional[str] = Field(None, description="docker --context to use")
    docker_host: Optional[str] = Field(None, description="docker --host to use")
    mock: bool = Field(False, description="Simulate container operations")
    log_file: Optional[str] = Field(None, description="Also log to this file")

    @property
    def config_path(self) -> Path:
        return Path(self.data_dir).expanduser() / CONFIG_FILE_NAME


def find_settings(settings_path: Optional[str] = None) -> Optional[str]:
    """Locate the active settings file, None if there is none."""
    if settings_path:
        return settings_path

    if env_settings := os.environ.get("WOCKER_STORAGE_SETTINGS"):
        return env_settings

    for path in SETTINGS_PATHS:
        if Path(path).exists():
            return path

    return None


def load_settings(settings_path: Optional[str] = None) -> Settings:
    """Load settings from YAML and apply environment overrides.

    Raises:
        ValidationError: If the settings file is unreadable or has unknown keys
    """
    path = find_settings(settings_path)
    raw = {}

    if path:
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            raise ValidationError(f"Settings file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ValidationError(f"Settings file {path} must contain a mapping")
        logger.debug(f"Loaded settings from {path}")

    if data_dir := os.environ.get("WOCKER_STORAGE_HOME"):
        raw["data_dir"] = data_dir
    if os.environ.get("WS_MOCK") == "1":
        raw["mock"] = True

    try:
        return Settings(**raw)
    except SchemaError as e:
        raise ValidationError(f"Invalid settings: {e}") from e
