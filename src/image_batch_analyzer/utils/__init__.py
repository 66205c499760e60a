"""
Utility functions and helpers.
"""

from .log_utils import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
