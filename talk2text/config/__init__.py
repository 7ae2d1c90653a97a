"""Simple YAML configuration loader for talk2text."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "talk2text.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "install": {
        "directory": "~/.cache/talk2text",
        # true: install on demand, "manual": never install the engine,
        # false: use whisper.command instead of an installed engine
        "auto_install": True,
        "repository_url": "https://github.com/ggerganov/whisper.cpp",
    },
    "whisper": {
        "model": "base",
        "model_path": None,
        "language": "en",
        "quantize": None,
        "threads": None,
        "translate": False,
        "speed_up": False,
        "print_progress": True,
        "command": None,
    },
    "capture": {
        "program": "ffmpeg",
        "input_format": None,
        "input_device": None,
        "timeout_seconds": 300,
        "temp_file": None,
        # ffmpeg exit codes that still mean "recording stopped", per input format.
        # Observed on dshow only; not a documented ffmpeg contract.
        "benign_exit_codes": {"dshow": [255]},
    },
    "output": {
        "insert_text_at_point": True,
        "return_cursor_to_start": True,
    },
    "storage": {
        "data_directory": "~/.local/share/talk2text",
    },
    "logging": {
        "level": "INFO",
        "file_path": None,
        "console_output": True,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Talk2TextConfig:
    """talk2text configuration loader."""

    def __init__(self, config_path: Optional[str] = None, values: Optional[Dict[str, Any]] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, uses talk2text.yaml
                        from the current directory when present, else defaults.
            values: Extra values merged over the file, mostly for tests.
        """
        if config_path is None and Path(DEFAULT_CONFIG_NAME).exists():
            config_path = DEFAULT_CONFIG_NAME

        self.config_file: Optional[Path] = Path(config_path) if config_path else None

        if self.config_file is not None and not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        if self.config_file is not None:
            logger.info(f"Loading configuration from: {self.config_file}")
            self.config = self._load_config()
        else:
            logger.info("No configuration file, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)

        if values:
            self.config = _deep_merge(self.config, values)

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _deep_merge(DEFAULT_CONFIG, loaded)

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in (
            ("install", "directory"),
            ("storage", "data_directory"),
            ("logging", "file_path"),
            ("capture", "temp_file"),
            ("whisper", "model_path"),
        ):
            value = config.get(section, {}).get(key)
            if not value:
                continue
            value = os.path.expanduser(str(value))
            if not os.path.isabs(value):
                config[section][key] = str(config_dir / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'whisper.model').

        Args:
            key_path: Dot-separated key path (e.g., 'capture.input_device')
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
            key_path: Dot-separated path to config value (e.g., 'whisper.language')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        # Set the final value
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def snapshot(self) -> "Talk2TextConfig":
        """Return an independent copy, used as the settings of one session."""
        clone = object.__new__(Talk2TextConfig)
        clone.config_file = self.config_file
        clone.config = copy.deepcopy(self.config)
        return clone

    def get_install_directory(self) -> Path:
        """Get the directory that holds the whisper.cpp checkout."""
        return Path(os.path.expanduser(str(self.get('install.directory')))).absolute()

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(os.path.expanduser(str(data_dir))).absolute())

    def get_log_file_path(self) -> str:
        """Get log file path, defaulting to <data>/logs/talk2text.log."""
        log_path = self.get('logging.file_path')
        if log_path:
            return os.path.expanduser(str(log_path))
        return str(Path(self.get_data_directory()) / "logs" / "talk2text.log")

    def get_auto_install(self):
        """Get auto-install mode: True, False or "manual"."""
        value = self.get('install.auto_install', True)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "manual":
                return "manual"
            if lowered in {"true", "yes", "on", "1"}:
                return True
            if lowered in {"false", "no", "off", "0"}:
                return False
            return value
        return value
