"""Logging package with Rich-based progress reporting."""

from .rich_logger import QuietProgressReporter, RichProgressReporter, configure_logging

__all__ = ["QuietProgressReporter", "RichProgressReporter", "configure_logging"]
