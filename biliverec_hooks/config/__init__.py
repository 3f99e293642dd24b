"""Simple YAML configuration loader for biliverec-hooks."""

import os
import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {
        "host": "",
        "port": 8080,
    },
    "storage": {
        "base_dir": ".",
    },
    "notify": {
        "bot_api": "http://localhost:8888",
        "timeout_seconds": None,
    },
    "status": {
        "log_dir": ".",
        "log_prefix": "bilirec",
        "log_suffix": ".txt",
    },
    "transcode": {
        "ffmpeg_path": "ffmpeg",
    },
    "rooms": {
        "track_state": True,
    },
    "logging": {
        "level": "INFO",
        "file_path": None,
        "console_output": True,
    },
}

# Keys holding filesystem paths that are resolved relative to the config file.
PATH_KEYS = ("storage.base_dir", "status.log_dir", "logging.file_path")


class HooksConfig:
    """biliverec-hooks configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used and everything comes from the command line.
        """
        self.config_file = Path(config_path) if config_path else None
        self.config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_file is None:
            logger.debug("No configuration file given, using defaults")
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self._merge(self.config, self._load_config())

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        self._resolve_paths(config)
        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for key_path in PATH_KEYS:
            section, key = key_path.split('.')
            section_config = config.get(section)
            if not isinstance(section_config, dict):
                continue

            value = section_config.get(key)
            if value and not os.path.isabs(value):
                section_config[key] = str(config_dir / value)

    @classmethod
    def _merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                cls._merge(base[key], value)
            else:
                base[key] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'server.port').

        Args:
            key_path: Dot-separated key path (e.g., 'storage.base_dir')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'server.port')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def apply_overrides(self, overrides: Dict[str, Any]) -> None:
        """Apply command line overrides; None values mean "not given"."""
        for key_path, value in overrides.items():
            if value is not None:
                self.set(key_path, value)

    def get_base_directory(self) -> str:
        """Get the base directory recordings are relative to.

        The value is used verbatim when joining relative recording paths, so
        it is not made absolute here.
        """
        return str(self.get('storage.base_dir', '.'))

    def get_log_directory(self) -> str:
        """Get the directory the recorder writes its status logs into."""
        return str(self.get('status.log_dir', '.'))

    def get_listen_address(self) -> str:
        return f"{self.get('server.host', '')}:{self.get('server.port', 8080)}"
