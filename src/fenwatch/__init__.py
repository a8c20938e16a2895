"""fenwatch: settled, de-duplicated position snapshots from live chess boards.

- `fenwatch.watch`: change detection and stabilization for polled/observed boards
- `fenwatch.feed`: direct push-feed path, channel tap and move submission
- `fenwatch.engine`: UCI engine process and async driver
- `fenwatch.core`: position normalization and configuration
"""

__version__ = "0.1.0"

from fenwatch.core import NormalizedPosition, complete_fen, normalize
from fenwatch.core.configs import AppConfig, load_app_config
from fenwatch.utils import setup_logging
from fenwatch.watch import EmissionSink, SourceWatcher

__all__ = [
    "AppConfig",
    "EmissionSink",
    "NormalizedPosition",
    "SourceWatcher",
    "__version__",
    "complete_fen",
    "load_app_config",
    "normalize",
    "setup_logging",
]
