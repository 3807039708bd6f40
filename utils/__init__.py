"""Utility functions."""

from .logging_setup import setup_logging
from .hex_preview import format_hex_preview

__all__ = ["setup_logging", "format_hex_preview"]
