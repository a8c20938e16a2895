"""Exception hierarchy for fenwatch."""


class FenwatchError(Exception):
    """Base class for errors raised by fenwatch."""


class ConfigError(FenwatchError, ValueError):
    """Raised when a configuration value is out of range."""


class UCIEngineError(FenwatchError):
    """Raised when UCI communication fails."""
