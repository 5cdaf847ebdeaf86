"""Configuration management for appmeta."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from ruamel.yaml import YAML

from .backup.metadata import TarType
from .util.logging import setup_logging

DEFAULT_CONFIG_PATH = Path.home() / ".config/appmeta/config.yaml"


class MetadataConfig(BaseModel):
    """Main configuration for appmeta."""

    model_config = ConfigDict(validate_assignment=True)

    backup_root: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/appmeta/backups",
        description="Root directory for backups"
    )
    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".config/appmeta",
        description="Configuration directory"
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional detailed log file")
    default_tar_type: TarType = Field(default=TarType.GZIP, description="Archive compression for new backups")


def load_config(config_path: Optional[Path] = None) -> MetadataConfig:
    """Load configuration from file or create default."""

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if config_path.exists():
        yaml = YAML(typ="safe")
        with open(config_path, "r") as f:
            data = yaml.load(f) or {}
        return MetadataConfig(**data)
    else:
        config = MetadataConfig()
        save_config(config, config_path)
        return config


def save_config(config: MetadataConfig, config_path: Optional[Path] = None) -> None:
    """Save configuration to file."""

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path.parent.mkdir(parents=True, exist_ok=True)

    yaml = YAML()
    yaml.default_flow_style = False

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(mode="json"), f)


def get_config() -> MetadataConfig:
    """Get the global configuration instance."""

    if not hasattr(get_config, "_config"):
        get_config._config = load_config()

    return get_config._config


def configure_logging(config: Optional[MetadataConfig] = None) -> logging.Logger:
    """Set up logging from the configured level and log file."""

    if config is None:
        config = get_config()

    return setup_logging(level=config.log_level, log_file=config.log_file)
