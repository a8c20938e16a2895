"""Strongly-typed configuration schemas for fenwatch.

These dataclasses are the single source of truth for every timing knob and
collaborator option. The module-level constants are the tuned defaults the
watcher ships with; YAML files and CLI overrides only replace them.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from fenwatch.errors import ConfigError

# Seconds. A settle read happens after SETTLE_DELAY, the confirm read
# CONFIRM_DELAY later; a detection burst gives up after MAX_WAIT.
SETTLE_DELAY = 0.22
CONFIRM_DELAY = 0.12
MAX_WAIT = 1.5
POLL_INTERVAL = 0.3

MOVETIME_MS = 1000
SEARCH_DEPTH = 4

BOARD_EVENTS = ("Move", "Undo", "ResetGame", "LoadFen")


@dataclass
class StabilizerConfig:
    """Timing of the sample/confirm protocol."""

    settle_delay: float = SETTLE_DELAY
    confirm_delay: float = CONFIRM_DELAY
    max_wait: float = MAX_WAIT

    def __post_init__(self) -> None:
        """Validate timings."""
        if self.settle_delay < 0 or self.confirm_delay < 0:
            msg = "settle_delay and confirm_delay must be non-negative"
            raise ConfigError(msg)
        if self.max_wait <= 0:
            msg = f"max_wait must be positive, got {self.max_wait}"
            raise ConfigError(msg)


@dataclass
class WatcherConfig:
    """Configuration for change detection on a live source."""

    poll_interval: float = POLL_INTERVAL
    events: list[str] = field(default_factory=lambda: list(BOARD_EVENTS))

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            msg = f"poll_interval must be positive, got {self.poll_interval}"
            raise ConfigError(msg)
        self.events = list(self.events)


@dataclass
class EngineConfig:
    """Configuration for the external UCI engine."""

    binary_path: str | None = None
    depth: int = SEARCH_DEPTH
    movetime_ms: int = MOVETIME_MS
    timeout: float = 30.0  # Seconds to wait for any UCI response
    skill_level: int = 10
    hash_mb: int = 16
    threads: int = 1

    def __post_init__(self) -> None:
        if self.movetime_ms <= 0:
            msg = f"movetime_ms must be positive, got {self.movetime_ms}"
            raise ConfigError(msg)
        if self.depth <= 0:
            msg = f"depth must be positive, got {self.depth}"
            raise ConfigError(msg)

    def uci_options(self) -> dict[str, int]:
        """Return the `setoption` values sent after `uci`."""
        return {
            "Skill Level": self.skill_level,
            "Hash": self.hash_mb,
            "Threads": self.threads,
        }


@dataclass
class FeedConfig:
    """Configuration for the push-feed path."""

    automove: bool = False
    game_end_status: int = 30  # gameState status codes >= this end the game


@dataclass
class AppConfig:
    """Top-level configuration combining all sub-configs."""

    stabilizer: StabilizerConfig = field(default_factory=StabilizerConfig)
    watcher: WatcherConfig = field(default_factory=WatcherConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)

    log_level: str = "INFO"
    log_file: str | None = None


def config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Create AppConfig from a dictionary (e.g., from OmegaConf).

    Args:
        data: Dictionary with configuration values.

    Returns:
        AppConfig instance.
    """
    return AppConfig(
        stabilizer=StabilizerConfig(**data.get("stabilizer", {})),
        watcher=WatcherConfig(**data.get("watcher", {})),
        engine=EngineConfig(**data.get("engine", {})),
        feed=FeedConfig(**data.get("feed", {})),
        log_level=data.get("log_level", "INFO"),
        log_file=data.get("log_file"),
    )


def config_to_dict(config: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to a dictionary for serialization."""
    return asdict(config)
