"""Application configuration management."""

from functools import lru_cache
from pathlib import Path

from .schemas import AppConfig
from .storage import read_json

CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'scoresheet_config.json'


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """
    Load configuration from data/scoresheet_config.json.

    Configuration is cached after first load.

    Returns:
        AppConfig object with validated settings

    Raises:
        FileNotFoundError: If scoresheet_config.json doesn't exist
        ValueError: If config file has invalid structure

    Example:
        from scoresheet.config import get_config
        config = get_config()
        print(f"Max players: {config.max_players}")
    """
    return read_json(CONFIG_PATH, schema=AppConfig)


def get_default_player_count() -> int:
    """Get the number of players a new session starts with."""
    return get_config().default_player_count


def get_player_bounds() -> tuple[int, int]:
    """Get (min_players, max_players) for a session."""
    config = get_config()
    return config.min_players, config.max_players


def get_player_colors() -> list[str]:
    """Get the palette cycled through when assigning player colors."""
    return get_config().player_colors


def get_default_player_name(n: int) -> str:
    """Get the default display name for the n-th player (1-based)."""
    return get_config().player_name_format.format(n=n)


def get_default_factor_units() -> tuple[str, str]:
    """Get labels used for product factors when a column sets none."""
    return get_config().default_factor_units


def get_history_limit() -> int:
    """Get how many history snapshots a cell keeps."""
    return get_config().history_limit


def get_default_direction() -> str:
    """Get the direction focus moves after an advance."""
    return get_config().default_direction


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime.
    """
    get_config.cache_clear()
