"""Configuration management for todo-md."""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from .views import TreeItemSortType

logger = logging.getLogger(__name__)


@dataclass
class ConfigModel:
    """Global configuration model for todo-md."""

    # Line syntax
    done_symbol: str = "x "
    comment_prefix: str = "# "
    tab_size: int = 4  # Indent unit when the host cannot report one

    # Completion
    add_completion_date: bool = True
    completion_date_include_time: bool = False

    # Grouping views
    sort_tags_view: TreeItemSortType = TreeItemSortType.ALPHABETIC
    sort_projects_view: TreeItemSortType = TreeItemSortType.ALPHABETIC
    sort_contexts_view: TreeItemSortType = TreeItemSortType.ALPHABETIC

    # File paths
    default_file: str = ""
    data_dir: str = "~/.todo-md"

    def __post_init__(self):
        """Post-initialization setup."""
        self.data_dir = os.path.expanduser(self.data_dir)
        if self.default_file:
            self.default_file = os.path.expanduser(self.default_file)
        if self.tab_size < 1:
            logger.warning("Invalid tab_size %r, falling back to 4", self.tab_size)
            self.tab_size = 4
        for name in ("sort_tags_view", "sort_projects_view", "sort_contexts_view"):
            value = getattr(self, name)
            if not isinstance(value, TreeItemSortType):
                try:
                    setattr(self, name, TreeItemSortType(value))
                except ValueError:
                    logger.warning("Invalid %s %r, using alphabetic", name, value)
                    setattr(self, name, TreeItemSortType.ALPHABETIC)

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {
            "done_symbol": self.done_symbol,
            "comment_prefix": self.comment_prefix,
            "tab_size": self.tab_size,
            "add_completion_date": self.add_completion_date,
            "completion_date_include_time": self.completion_date_include_time,
            "sort_tags_view": self.sort_tags_view.value,
            "sort_projects_view": self.sort_projects_view.value,
            "sort_contexts_view": self.sort_contexts_view.value,
            "default_file": self.default_file,
            "data_dir": self.data_dir,
        }
        return yaml.dump(data, default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML."""
        data = yaml.safe_load(yaml_str) or {}

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

        return cls(**{key: value for key, value in data.items() if key in known})

    def get_config_path(self) -> Path:
        """Get the config file path."""
        return Path(self.data_dir) / "config.yaml"


class Config:
    """Configuration manager for todo-md."""

    _instance: Optional[ConfigModel] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Load configuration from file or fall back to defaults."""
        if cls._instance is not None and config_path is None:
            return cls._instance

        config = ConfigModel()

        if config_path is None:
            config_path = config.get_config_path()

        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    yaml_content = f.read()
                config = ConfigModel.from_yaml(yaml_content)
                logger.info("Loaded configuration from %s", config_path)
            except (OSError, yaml.YAMLError, TypeError) as e:
                logger.warning("Failed to load config from %s: %s. Using defaults.", config_path, e)
        else:
            logger.debug("No configuration at %s, using defaults", config_path)

        cls._instance = config
        return config

    @classmethod
    def save(cls, config: ConfigModel, config_path: Optional[Path] = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = config.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            f.write(config.to_yaml())
        logger.info("Configuration saved to %s", config_path)

    @classmethod
    def get(cls) -> ConfigModel:
        """Get the current configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the cached configuration."""
        cls._instance = None


def get_config() -> ConfigModel:
    """Get the current configuration."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file."""
    return Config.load(config_path)


def save_config(config: ConfigModel, config_path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    Config.save(config, config_path)
