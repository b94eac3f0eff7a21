"""Game configuration management."""

import os
from functools import lru_cache
from pathlib import Path

from .schemas import GameConfig
from .utils import load_json

CONFIG_ENV_VAR = 'PREDICTXI_CONFIG'
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'game_config.json'


def load_config(config_path: Path | str) -> GameConfig:
    """Load and validate a configuration file without caching."""
    return load_json(config_path, schema=GameConfig)


@lru_cache(maxsize=1)
def get_config() -> GameConfig:
    """
    Load game configuration from data/game_config.json.

    The PREDICTXI_CONFIG environment variable overrides the path.
    Configuration is cached after first load.

    Returns:
        GameConfig object with validated settings

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file has invalid structure

    Example:
        from predictxi.config import get_config
        config = get_config()
        print(f"Season: {config.season}")
    """
    config_path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return load_config(config_path)


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file or PREDICTXI_CONFIG changes at runtime.
    """
    get_config.cache_clear()
