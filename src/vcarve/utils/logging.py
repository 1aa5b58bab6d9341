"""Logging utilities for vcarve."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class ProcessingStats:
    """Statistics from a processing run."""

    sources_processed: int = 0
    contour_count: int = 0
    segment_count: int = 0
    join_count: int = 0
    sample_count: int = 0
    zero_depth_count: int = 0
    warning_count: int = 0
    error_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    source_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_source_time_ms(self) -> float | None:
        """Average time spent per source, None before any source finished."""
        if not self.source_timings_ms:
            return None
        return sum(self.source_timings_ms) / len(self.source_timings_ms)


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_vcarve", False):
            root_logger.removeHandler(handler)
            handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        file_handler._vcarve = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        console_handler._vcarve = True  # type: ignore[attr-defined]
        root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("vcarve")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class ProcessingLogger:
    """Logger for tracking processing progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = ProcessingStats()

    def log_source_start(self, source_name: str) -> None:
        """Log start of source processing."""
        self._logger.debug("Processing source", source=source_name)

    def log_source_complete(
        self,
        source_name: str,
        contours: int,
        samples: int,
        duration_ms: float,
    ) -> None:
        """Log successful source processing."""
        self._logger.info(
            "Source processed",
            source=source_name,
            contours=contours,
            samples=samples,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.sources_processed += 1
        self._stats.source_timings_ms.append(duration_ms)

    def log_source_error(
        self,
        source_name: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log source processing error."""
        self._logger.error(
            "Source processing failed",
            source=source_name,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((source_name, str(error)))

    def log_contour(
        self,
        source_name: str,
        contour_index: int,
        segments: int,
        joins: int,
        winding: int,
        is_hole: bool,
    ) -> None:
        """Log contour assembly results."""
        self._logger.debug(
            "Contour assembled",
            source=source_name,
            contour=contour_index,
            segments=segments,
            joins=joins,
            winding=winding,
            hole=is_hole,
        )
        self._stats.contour_count += 1
        self._stats.segment_count += segments
        self._stats.join_count += joins

    def log_normal_warning(
        self,
        source_name: str,
        contour_index: int,
        segment_index: int,
        reason: str,
    ) -> None:
        """Log a segment whose normals cannot be trusted."""
        self._logger.warning(
            "Unrepresentable normal",
            source=source_name,
            contour=contour_index,
            segment=segment_index,
            reason=reason,
        )
        self._stats.warning_count += 1

    def log_toolpath(self, source_name: str, samples: int, zero_depth: int) -> None:
        """Log toolpath generation results."""
        self._logger.debug(
            "Toolpath generated",
            source=source_name,
            samples=samples,
            zero_depth=zero_depth,
        )
        self._stats.sample_count += samples
        self._stats.zero_depth_count += zero_depth

    @property
    def stats(self) -> ProcessingStats:
        """Get current processing statistics."""
        return self._stats
