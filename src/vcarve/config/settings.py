"""Configuration settings for vcarve."""

import math
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


def decimals_for(value: float) -> int:
    """Number of decimals needed to represent a granularity such as 0.01.

    Args:
        value: Granularity (e.g. 0.01, 0.25, 1)

    Returns:
        Decimal places of the shortest representation of ``value``
    """
    text = repr(float(value))
    if "e" in text:
        mantissa, exponent = text.split("e")
        digits = len(mantissa.split(".")[1].rstrip("0")) if "." in mantissa else 0
        return max(0, digits - int(exponent))
    fraction = text.split(".")[1].rstrip("0")
    return len(fraction)


class ToolConfig(BaseModel):
    """Conical cutter geometry."""

    angle: float = Field(
        default=45.0,
        gt=0.0,
        lt=90.0,
        description="Cone half-angle in degrees",
    )
    radius: float = Field(
        default=2.0,
        gt=0.0,
        description="Maximum cutting radius of the tool",
    )


class PrecisionConfig(BaseModel):
    """Granularities for rounding, depth search and curve sampling.

    Rounding decimals are derived from the configured values, so 0.01 rounds
    to two decimals and 0.005 to three.
    """

    tool_precision: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Tool movement precision used for rounding and comparisons",
    )
    step_resolution: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Smallest radius step of the safe-depth search",
    )
    trace_step: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Parametric sampling step along each segment",
    )

    @field_validator("trace_step")
    @classmethod
    def _divides_unit_interval(cls, value: float) -> float:
        count = 1.0 / value
        if not math.isclose(count, round(count), abs_tol=1e-9):
            raise ValueError("trace_step must divide 1 into whole steps")
        return value

    @property
    def precision_decimals(self) -> int:
        """Decimals used when rounding emitted and compared coordinates."""
        return decimals_for(self.tool_precision)

    @property
    def sample_count(self) -> int:
        """Number of intervals between samples on one segment."""
        return round(1.0 / self.trace_step)

    def round(self, value: float) -> float:
        """Round a coordinate to the tool precision."""
        rounded = round(value, self.precision_decimals)
        # Avoid emitting -0.0
        return rounded + 0.0


class MachineConfig(BaseModel):
    """Machine program settings."""

    feed_rate: int = Field(
        default=100,
        gt=0,
        description="Cutting feed rate written to the program header",
    )
    safe_height: float = Field(
        default=0.5,
        ge=0.0,
        description="Z height for non-cutting moves",
    )
    max_depth: float = Field(
        default=25.0,
        gt=0.0,
        description="Deepest cut the machine is allowed to make",
    )


class ProcessingConfig(BaseModel):
    """Configuration for toolpath processing."""

    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Max worker processes (None = auto, 1 = in-process)",
    )
    resolve_holes: bool = Field(
        default=True,
        description="Flip the winding of nested contours so holes are carved around",
    )
    join_angle_tolerance: float = Field(
        default=1e-6,
        ge=0.0,
        description="Normals closer than this angle (radians) need no join",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class VCarveSettings(BaseModel):
    """Main application settings."""

    tool: ToolConfig = Field(default_factory=ToolConfig)
    precision: PrecisionConfig = Field(default_factory=PrecisionConfig)
    machine: MachineConfig = Field(default_factory=MachineConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> VCarveSettings:
    """Get default application settings."""
    return VCarveSettings()
