"""Utility functions for vcarve.

This module provides utility functions including:

- Logging setup and configuration
- Progress and statistics tracking
"""

from vcarve.utils.logging import (
    ProcessingLogger,
    ProcessingStats,
    configure_logging,
)

__all__ = [
    "ProcessingLogger",
    "ProcessingStats",
    "configure_logging",
]
