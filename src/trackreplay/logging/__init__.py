"""Logging utilities for trackreplay."""

from trackreplay.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
