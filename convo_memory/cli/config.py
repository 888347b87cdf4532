"""
Configuration management for the Convo Memory CLI.

Loads settings from a .env file and an optional JSON config file holding
context management overrides.
"""

import os
import json
import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ..context.profiles import ContextConfig

logger = logging.getLogger(__name__)


class CLIConfig:
    """Configuration manager for the Convo Memory CLI."""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize CLI configuration.

        Args:
            env_file: Path to .env file. If None, checks CONVO_MEMORY_ENV_FILE
                      env var, then falls back to .env in current directory
        """
        self._config_json: Dict[str, Any] = {}

        if env_file:
            self.env_file = env_file
        else:
            self.env_file = os.path.expanduser(os.getenv('CONVO_MEMORY_ENV_FILE', '.env'))
        self._load_env()
        self._load_config_json()

    def _load_env(self):
        """Load environment variables from .env file."""
        if os.path.exists(self.env_file):
            load_dotenv(self.env_file, override=True)
            logger.debug(f"Loaded environment from {self.env_file}")
        else:
            logger.debug(f"No .env file found at {self.env_file}, using system environment")

    def _load_config_json(self):
        """Load context overrides from the file named by CONVO_MEMORY_CONFIG."""
        config_path = os.getenv('CONVO_MEMORY_CONFIG')
        if not config_path:
            return

        config_path = os.path.expanduser(config_path)
        if not os.path.exists(config_path):
            logger.warning(f"CONVO_MEMORY_CONFIG set to {config_path} but file not found")
            return

        try:
            with open(config_path, 'r') as f:
                self._config_json = json.load(f)
            logger.debug(f"Loaded config from {config_path}")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load config file: {e}")

    @property
    def default_model(self) -> Optional[str]:
        """Get default model from environment or config file."""
        return os.getenv('CONVO_MEMORY_DEFAULT_MODEL') or self._config_json.get('default_model')

    @property
    def context_config(self) -> ContextConfig:
        """
        Build the context configuration.

        The 'context' section overrides ContextConfig fields and the
        'model_limits' section adds or overrides model context limits.

        Raises:
            pydantic.ValidationError: If the overrides are invalid
        """
        overrides = self._config_json.get('context', {})
        config = ContextConfig(**overrides) if isinstance(overrides, dict) else ContextConfig()

        limits = self._config_json.get('model_limits', {})
        if isinstance(limits, dict) and limits:
            config = config.with_limits(limits)
        return config


def get_config(env_file: Optional[str] = None) -> CLIConfig:
    """
    Get CLI configuration instance.

    Args:
        env_file: Optional path to .env file

    Returns:
        CLIConfig instance
    """
    return CLIConfig(env_file=env_file)
