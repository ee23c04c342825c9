"""Simple YAML configuration loader for InterviewMate."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULTS: Dict[str, Any] = {
    "host": {
        "base_url": "http://127.0.0.1:8765",
        "timeout_seconds": 30.0,
    },
    "audio": {
        "sample_rate": 16000,
        "chunk_size": 1024,
        "channels": 1,
    },
    "session": {
        "tick_interval_seconds": 1.0,
        "initial_speaker": "interviewee",
    },
    "conversation": {
        "duplicate_policy": "merge",
    },
    "shortcuts": {
        "toggle_recording": " ",
        "toggle_speaker": "s",
        "quit": "q",
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/interviewmate.log",
        "console_output": True,
    },
}


class InterviewMateConfig:
    """InterviewMate configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used and relative paths resolve against the
                        current directory.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = _merge({}, DEFAULTS)
            self._resolve_paths(self.config, Path.cwd())
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _merge(config, DEFAULTS)
        self._resolve_paths(config, self.config_file.parent)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any], base_dir: Path) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        log_path = config.get('logging', {}).get('file_path')
        if log_path and not os.path.isabs(log_path):
            config['logging']['file_path'] = str(base_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'host.base_url').

        Args:
            key_path: Dot-separated key path (e.g., 'audio.sample_rate')
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
            key_path: Dot-separated path to config value (e.g., 'logging.level')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_host_url(self) -> str:
        """Get host base URL without a trailing slash."""
        base_url = self.get('host.base_url')
        if not base_url:
            raise ValueError("host.base_url not configured")
        return str(base_url).rstrip('/')


def _merge(config: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``config`` with missing keys filled in from ``defaults``."""
    merged = dict(config)
    for key, default in defaults.items():
        if key not in merged:
            merged[key] = _merge({}, default) if isinstance(default, dict) else default
        elif isinstance(default, dict) and isinstance(merged[key], dict):
            merged[key] = _merge(merged[key], default)
    return merged
