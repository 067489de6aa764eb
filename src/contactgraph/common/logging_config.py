"""
Logging configuration for the contactgraph library.

This module provides centralized logging configuration with support for:
- Console and file output handlers
- Environment variable configuration
- Structured (JSON) formatting
- Timing of the expensive steps (trace loading, event sweeps, simulations)
"""

import logging
import logging.handlers
import os
import sys
import time
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime
import json


# Default configuration constants
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5

ROOT_LOGGER_NAME = "contactgraph"

# Environment variable names
ENV_LOG_LEVEL = "CONTACTGRAPH_LOG_LEVEL"
ENV_LOG_FILE = "CONTACTGRAPH_LOG_FILE"
ENV_LOG_DIR = "CONTACTGRAPH_LOG_DIR"
ENV_LOG_CONSOLE = "CONTACTGRAPH_LOG_CONSOLE"
ENV_LOG_JSON = "CONTACTGRAPH_LOG_JSON"
ENV_LOG_PERFORMANCE = "CONTACTGRAPH_LOG_PERFORMANCE"

_STANDARD_RECORD_FIELDS = {
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "getMessage", "exc_info", "exc_text",
    "stack_info", "message", "taskName"
}


class PerformanceFilter(logging.Filter):
    """
    Filter keeping only performance-related log messages.

    Used to route timing information produced by LoggingTimer to a
    separate log file.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        performance_keywords = [
            "performance", "timing", "duration", "elapsed", "benchmark",
            "memory", "cpu", "optimization", "profiling", "metrics"
        ]

        message = record.getMessage().lower()
        return any(keyword in message for keyword in performance_keywords)


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON objects, including any ``extra`` fields
    attached to the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_FIELDS:
                log_obj[key] = value

        return json.dumps(log_obj, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Parameters
    ----------
    name : str
        The name for the logger (typically __name__)

    Returns
    -------
    logging.Logger
        Logger instance

    Notes
    -----
    Module loggers live under the ``contactgraph`` hierarchy and inherit the
    handlers installed by setup_logging(). Without setup_logging() Python's
    default configuration applies.
    """
    return logging.getLogger(name)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console: Optional[bool] = None,
    json_format: Optional[bool] = None,
    performance_logging: Optional[bool] = None,
    force_setup: bool = False
) -> logging.Logger:
    """
    Set up logging configuration for the contactgraph library.

    Parameters
    ----------
    level : str, optional
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        If None, uses CONTACTGRAPH_LOG_LEVEL or defaults to INFO.
    log_file : str, optional
        Path to log file. If None, uses CONTACTGRAPH_LOG_FILE.
        If not specified and a log directory is known, uses
        'contactgraph.log' inside it.
    log_dir : str, optional
        Directory for log files. If None, uses CONTACTGRAPH_LOG_DIR.
        Without either, no file handler is installed.
    console : bool, optional
        Whether to enable console logging. If None, uses
        CONTACTGRAPH_LOG_CONSOLE or defaults to True.
    json_format : bool, optional
        Whether to use JSON formatting. If None, uses CONTACTGRAPH_LOG_JSON
        or defaults to False.
    performance_logging : bool, optional
        Whether to enable the performance logging filter. If None, uses
        CONTACTGRAPH_LOG_PERFORMANCE or defaults to False.
    force_setup : bool, default False
        Whether to force reconfiguration if logging is already set up.

    Returns
    -------
    logging.Logger
        The configured root logger of the library

    Raises
    ------
    ValueError
        If invalid logging level is specified
    OSError
        If log directory cannot be created

    Examples
    --------
    >>> logger = setup_logging()
    >>> logger = setup_logging(level="DEBUG", log_file="analysis.log")
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)

    if not force_setup and root_logger.handlers:
        return root_logger

    if force_setup:
        root_logger.handlers.clear()

    config = _resolve_logging_config(
        level=level,
        log_file=log_file,
        log_dir=log_dir,
        console=console,
        json_format=json_format,
        performance_logging=performance_logging
    )

    log_level = getattr(logging, str(config["level"]).upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Invalid logging level: {config['level']}")
    root_logger.setLevel(log_level)

    if config["json_format"]:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT)

    if config["console"]:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if config["log_file"]:
        log_path = Path(config["log_file"])
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=config["log_file"],
            maxBytes=DEFAULT_MAX_FILE_SIZE,
            backupCount=DEFAULT_BACKUP_COUNT,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        if config["performance_logging"]:
            perf_filter = PerformanceFilter()
            perf_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.performance")

            perf_handler = logging.handlers.RotatingFileHandler(
                filename=str(log_path.parent / "performance.log"),
                maxBytes=DEFAULT_MAX_FILE_SIZE,
                backupCount=DEFAULT_BACKUP_COUNT,
                encoding="utf-8"
            )
            perf_handler.setFormatter(formatter)
            perf_handler.addFilter(perf_filter)
            perf_logger.addHandler(perf_handler)

    # Avoid duplicate messages through the Python root logger
    root_logger.propagate = False

    root_logger.debug(
        "Logging configured: level=%s, console=%s, file=%s, json=%s",
        config["level"], config["console"],
        config["log_file"] or "None", config["json_format"]
    )

    return root_logger


def _resolve_logging_config(**kwargs) -> Dict[str, Any]:
    """
    Resolve logging configuration from parameters and environment variables.

    Parameters take precedence over environment variables, which take
    precedence over defaults.
    """
    def _get_bool_env(env_var: str, default: bool) -> bool:
        value = os.getenv(env_var, "").lower()
        if value in ("true", "yes", "1", "on"):
            return True
        elif value in ("false", "no", "0", "off"):
            return False
        else:
            return default

    level = kwargs.get("level") or os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)

    log_dir = kwargs.get("log_dir") or os.getenv(ENV_LOG_DIR)
    log_file = kwargs.get("log_file") or os.getenv(ENV_LOG_FILE)

    if not log_file and log_dir:
        log_file = os.path.join(log_dir, "contactgraph.log")

    console = kwargs.get("console")
    if console is None:
        console = _get_bool_env(ENV_LOG_CONSOLE, True)

    json_format = kwargs.get("json_format")
    if json_format is None:
        json_format = _get_bool_env(ENV_LOG_JSON, False)

    performance_logging = kwargs.get("performance_logging")
    if performance_logging is None:
        performance_logging = _get_bool_env(ENV_LOG_PERFORMANCE, False)

    return {
        "level": level,
        "log_file": log_file,
        "console": console,
        "json_format": json_format,
        "performance_logging": performance_logging,
    }


def configure_external_library_logging(
    libraries: Optional[Dict[str, str]] = None
) -> None:
    """
    Quiet the loggers of third-party libraries.

    Parameters
    ----------
    libraries : Dict[str, str], optional
        Mapping of library logger names to levels. Defaults to WARNING for
        matplotlib, PIL and numexpr (pulled in by the plotting stack).
    """
    default_config = {
        "matplotlib": "WARNING",
        "PIL": "WARNING",
        "numexpr": "WARNING",
    }

    config = libraries or default_config

    for library_name, level in config.items():
        library_level = getattr(logging, level.upper(), None)
        if not isinstance(library_level, int):
            continue
        logging.getLogger(library_name).setLevel(library_level)


def log_function_entry(func_name: str, **kwargs) -> None:
    """
    Log function entry with parameters (for debugging).

    Parameters
    ----------
    func_name : str
        Name of the function being entered
    **kwargs
        Function parameters to log
    """
    logger = get_logger(f"{ROOT_LOGGER_NAME}.debug")
    if logger.isEnabledFor(logging.DEBUG):
        param_str = ", ".join([f"{k}={v}" for k, v in kwargs.items()])
        logger.debug("Entering %s(%s)", func_name, param_str)


def log_performance_metric(
    operation: str,
    duration: float,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log performance metrics for operations.

    Parameters
    ----------
    operation : str
        Name of the operation that was timed
    duration : float
        Duration in seconds
    details : Dict[str, Any], optional
        Additional details about the operation (node count, etc.)
    """
    logger = get_logger(f"{ROOT_LOGGER_NAME}.performance")

    message = f"Performance: {operation} completed in {duration:.3f}s"

    if details:
        detail_str = ", ".join([f"{k}={v}" for k, v in details.items()])
        message += f" ({detail_str})"

    logger.info(message, extra={"operation": operation, "elapsed": duration, **(details or {})})


class LoggingTimer:
    """
    Context manager for timing operations with automatic logging.

    Examples
    --------
    >>> with LoggingTimer("simulate_edge_markovian", {"nodes": 50}):
    ...     pass
    """

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.details = details or {}
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            duration = time.perf_counter() - self.start_time
            log_performance_metric(self.operation, duration, self.details)
