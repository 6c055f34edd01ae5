"""
Structured logging system for denkmal.

Provides centralized logging with console and file output and
search metrics for monitoring query volume and storage health.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for searches and their facets.
    """

    def __init__(
        self,
        name: str = "denkmal",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        self.metrics = {
            "searches": 0,
            "tokens": 0,
            "facets": {},
            "storage_failures": 0,
            "errors_by_type": {},
        }

        if enable_console:
            # stderr keeps CLI result output on stdout clean
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"denkmal_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, ensure_ascii=False, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_search(self, token_count: int):
        """Count one search call and the tokens it produced."""
        self.metrics["searches"] += 1
        self.metrics["tokens"] += token_count

    def record_facet(self, facet: str, candidates: int, results: int):
        """Accumulate candidate and ranked result counts for a facet."""
        stats = self.metrics["facets"].setdefault(
            facet, {"runs": 0, "candidates": 0, "results": 0}
        )
        stats["runs"] += 1
        stats["candidates"] += candidates
        stats["results"] += results

    def record_storage_failure(self, error_type: str):
        self.metrics["storage_failures"] += 1
        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return current metrics with per-facet averages."""
        metrics_copy = self.metrics.copy()
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        metrics_copy["facets"] = {}
        for facet, stats in self.metrics["facets"].items():
            stats = dict(stats)
            if stats["runs"] > 0:
                stats["avg_results"] = round(stats["results"] / stats["runs"], 3)
            metrics_copy["facets"][facet] = stats

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Search Session Metrics ===")
        self.info(f"Searches: {metrics['searches']} ({metrics['tokens']} tokens)")

        if metrics["facets"]:
            self.info("Facets:")
            for facet, stats in metrics["facets"].items():
                self.info(
                    f"  {facet}: {stats['candidates']} candidates, "
                    f"{stats['results']} results, avg {stats.get('avg_results', 0)}"
                )

        if metrics["errors_by_type"]:
            self.info(f"Storage failures: {metrics['storage_failures']}")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "denkmal",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
