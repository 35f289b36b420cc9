"""
Logging configuration for the comparison engine.

Provides structured logging with:
- JSON formatting for log aggregators
- Human-readable formatting for development
- Comparison-specific logging for audit trails
"""

import json
import logging
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Context variable for correlating log lines of one comparison
calculation_id_var: ContextVar[Optional[str]] = ContextVar("calculation_id", default=None)


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs logs as JSON objects for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        calculation_id = calculation_id_var.get()
        if calculation_id:
            log_data["calculation_id"] = calculation_id

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """
    Human-readable log formatter for development.
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human readability."""
        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            level = f"{color}{record.levelname:8s}{self.COLORS['RESET']}"
        else:
            level = f"{record.levelname:8s}"

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        message = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        if hasattr(record, "extra_data") and record.extra_data:
            extras = " | ".join(f"{k}={v}" for k, v in record.extra_data.items())
            message += f" | {extras}"

        return message


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in all log messages.
    """

    def process(self, msg: str, kwargs: Dict) -> tuple:
        """Add context to log message."""
        extra = kwargs.get("extra", {})

        extra_data = dict(self.extra)
        calculation_id = calculation_id_var.get()
        if calculation_id:
            extra_data["calculation_id"] = calculation_id
        extra_data.update(extra.get("extra_data", {}))

        extra["extra_data"] = extra_data
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None,
) -> None:
    """
    Configure logging for a host process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON formatted logs
        log_file: Optional file path for log output (always JSON)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter: logging.Formatter = JsonFormatter() if json_output else ReadableFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)


def configure_from_settings() -> None:
    """Configure logging from ``ENTITYTAX_LOG_LEVEL`` / ``ENTITYTAX_LOG_JSON``."""
    from entitytax.config.settings import get_settings

    settings = get_settings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs

    Returns:
        ContextLogger instance
    """
    return ContextLogger(logging.getLogger(name), extra)


class CalculationLogger:
    """
    Specialized logger for structure comparisons.

    Records the inputs that drove a comparison, both scenario outcomes,
    the crossover search and the final recommendation.
    """

    def __init__(self, calculation_id: Optional[str] = None):
        self.logger = get_logger("entitytax.calculation", calculation_id=calculation_id)
        self.calculation_id = calculation_id
        self._start_time: Optional[float] = None

    def start_comparison(self, year_assessment: str, mode: str, business_profit: float) -> None:
        """Log comparison start."""
        self._start_time = time.perf_counter()
        self.logger.info(
            "Starting structure comparison",
            extra={"extra_data": {
                "year_assessment": year_assessment,
                "mode": mode,
                "business_profit": business_profit,
            }},
        )

    def log_scenario(self, scenario: str, net_cash: float, total_tax: float, **data) -> None:
        """Log one scenario outcome."""
        self.logger.debug(
            f"Scenario computed: {scenario}",
            extra={"extra_data": {
                "scenario": scenario,
                "net_cash": net_cash,
                "total_tax": total_tax,
                **data,
            }},
        )

    def log_crossover(self, crossover: Optional[int], source: str) -> None:
        """Log the crossover profit and where it came from (cache, search, early exit)."""
        self.logger.debug(
            "Crossover resolved",
            extra={"extra_data": {"crossover_point_profit": crossover, "source": source}},
        )

    def log_result(self, which_is_better: str, difference: float, warnings: int) -> None:
        """Log final comparison result."""
        duration_ms = (
            int((time.perf_counter() - self._start_time) * 1000) if self._start_time else 0
        )
        self.logger.info(
            "Comparison complete",
            extra={"extra_data": {
                "which_is_better": which_is_better,
                "difference": difference,
                "warnings": warnings,
                "duration_ms": duration_ms,
            }},
        )

    def log_warning(self, message: str, **data: Any) -> None:
        """Log comparison warning."""
        self.logger.warning(message, extra={"extra_data": data})
