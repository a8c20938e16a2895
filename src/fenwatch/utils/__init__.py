"""Shared utilities for fenwatch."""

from fenwatch.utils.logging import setup_logging

__all__ = ["setup_logging"]
