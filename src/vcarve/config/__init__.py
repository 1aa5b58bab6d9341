"""Configuration management for vcarve.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- ToolConfig: Conical cutter geometry
- PrecisionConfig: Rounding, search and sampling granularities
- MachineConfig: Machine program settings
- ProcessingConfig: Worker and orientation settings
- LoggingConfig: Logging settings
- VCarveSettings: Main application settings
"""

from vcarve.config.settings import (
    LoggingConfig,
    MachineConfig,
    PrecisionConfig,
    ProcessingConfig,
    ToolConfig,
    VCarveSettings,
    decimals_for,
    get_default_settings,
)

__all__ = [
    "LoggingConfig",
    "MachineConfig",
    "PrecisionConfig",
    "ProcessingConfig",
    "ToolConfig",
    "VCarveSettings",
    "decimals_for",
    "get_default_settings",
]
