"""Configuration management utilities."""

from fenwatch.core.configs.loader import load_app_config, load_config, save_config
from fenwatch.core.configs.schema import (
    BOARD_EVENTS,
    CONFIRM_DELAY,
    MAX_WAIT,
    MOVETIME_MS,
    POLL_INTERVAL,
    SEARCH_DEPTH,
    SETTLE_DELAY,
    AppConfig,
    EngineConfig,
    FeedConfig,
    StabilizerConfig,
    WatcherConfig,
    config_from_dict,
    config_to_dict,
)

__all__ = [
    "BOARD_EVENTS",
    "CONFIRM_DELAY",
    "MAX_WAIT",
    "MOVETIME_MS",
    "POLL_INTERVAL",
    "SEARCH_DEPTH",
    "SETTLE_DELAY",
    "AppConfig",
    "EngineConfig",
    "FeedConfig",
    "StabilizerConfig",
    "WatcherConfig",
    "config_from_dict",
    "config_to_dict",
    "load_app_config",
    "load_config",
    "save_config",
]
