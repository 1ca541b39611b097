"""
Logging setup for the canonical_orient package.

Records are written to stderr in a compact human format and, optionally,
to a JSON-lines file. Orientation vectors passed through ``extra`` (numpy
arrays, lists or tuples of three numbers) are rendered as ``<x, y, z>`` on
the console and as plain lists in JSON.

Usage:
    from canonical_orient.logging_config import setup_logging, get_logger

    setup_logging(level="DEBUG", json_file="orient.log.json")

    logger = get_logger(__name__)
    logger.info("Derived rotation", extra={"axis_id": "AP", "angle_deg": 90.0})
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar, Union

import numpy as np

F = TypeVar('F', bound=Callable[..., Any])

PACKAGE_LOGGER = "canonical_orient"

# Attributes set by logging itself; everything else arrived through `extra`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime", "taskName",
}

_LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[35m',
}
_RESET = '\033[0m'


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


def _short_name(name: str) -> str:
    prefix = PACKAGE_LOGGER + "."
    return name[len(prefix):] if name.startswith(prefix) else name


def _as_vector(value: Any) -> Optional[List[float]]:
    if isinstance(value, np.ndarray) and value.shape == (3,):
        return [float(v) for v in value]
    if isinstance(value, (list, tuple)) and len(value) == 3 \
            and all(isinstance(v, (int, float)) for v in value):
        return [float(v) for v in value]
    return None


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: timestamp, level, logger, message; ``location`` for WARNING and
    above; ``exception`` when exc_info is set; then any extra fields.
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    @staticmethod
    def _jsonable(value: Any) -> Any:
        vector = _as_vector(value)
        if vector is not None:
            return vector
        if isinstance(value, np.generic):
            return value.item()
        try:
            json.dumps(value)
        except (TypeError, ValueError):
            return str(value)
        return value

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if self.include_extra:
            entry.update((k, self._jsonable(v)) for k, v in _extras(record).items())
        return json.dumps(entry, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """``[HH:MM:SS] LEVEL    module: message [key=value, ...]``

    The package prefix is dropped from logger names, floats are shown to
    three significant digits and vectors as ``<x, y, z>``.
    """

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        super().__init__()
        self.use_colors = use_colors
        self.show_extra = show_extra

    @staticmethod
    def _render(value: Any) -> str:
        vector = _as_vector(value)
        if vector is not None:
            return "<" + ", ".join(f"{v:.3g}" for v in vector) + ">"
        if isinstance(value, (float, np.floating)):
            return f"{value:.3g}"
        return str(value)

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors and record.levelno in _LEVEL_COLORS:
            level = _LEVEL_COLORS[record.levelno] + level + _RESET

        line = "[{}] {} {}: {}".format(
            datetime.fromtimestamp(record.created).strftime("%H:%M:%S"),
            level,
            _short_name(record.name),
            record.getMessage(),
        )

        extras = _extras(record) if self.show_extra else {}
        if extras:
            line += " [" + ", ".join(f"{k}={self._render(v)}" for k, v in extras.items()) + "]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(
    level: Union[int, str] = logging.INFO,
    json_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    use_colors: bool = True,
    root_logger: bool = False,
) -> logging.Logger:
    """Install handlers on the package logger, replacing any existing ones.

    Args:
        level: Numeric level or a level name ("debug", "INFO", ...)
        json_file: Also append JSON lines to this file
        console: Write human-readable lines to stderr
        use_colors: ANSI colors on the console
        root_logger: Configure the root logger instead of the package logger

    Returns:
        The configured logger

    Raises:
        ValueError: If ``level`` is an unknown name
    """
    level = _resolve_level(level)

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
        handlers[-1].setFormatter(ConsoleFormatter(use_colors=use_colors))
    if json_file:
        handlers.append(logging.FileHandler(Path(json_file), encoding='utf-8'))
        handlers[-1].setFormatter(JSONFormatter())

    logger = logging.getLogger("" if root_logger else PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    if not root_logger:
        logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def log_timing(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    **extra_fields: Any
) -> Iterator[Dict[str, Any]]:
    """Log start and completion of ``operation`` with the elapsed time.

    An exception is logged at ERROR with the elapsed time and re-raised.

    Example:
        with log_timing(logger, "canonical transform construction"):
            unit = CanonicalTransform(source)

    Yields:
        dict receiving ``elapsed_seconds`` on success; callers may add keys
        to be logged with the completion record
    """
    timing_info: Dict[str, Any] = {}

    def extra(event: str, **fields: Any) -> Dict[str, Any]:
        return {"event": event, "operation": operation, **extra_fields, **fields}

    logger.log(level, "Starting: %s", operation, extra=extra("start"))
    start = time.perf_counter()
    try:
        yield timing_info
    except Exception as e:
        elapsed = time.perf_counter() - start
        logger.error("Failed: %s (%.3fs) - %s", operation, elapsed, e,
                     extra=extra("error", elapsed_seconds=elapsed, error=str(e)))
        raise

    timing_info['elapsed_seconds'] = time.perf_counter() - start
    logger.log(level, "Completed: %s (%.3fs)", operation, timing_info['elapsed_seconds'],
               extra=extra("complete", **timing_info))


def timed(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    operation: Optional[str] = None,
) -> Callable[[F], F]:
    """Decorator form of :func:`log_timing`; logs to the function's module
    logger unless ``logger`` is given."""
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with log_timing(logger or logging.getLogger(func.__module__),
                            operation or func.__name__, level):
                return func(*args, **kwargs)
        return wrapper  # type: ignore
    return decorator


class _ContextFilter(logging.Filter):
    """Copies the fields of every open LogContext onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for context in LogContext._stack:
            for key, value in context.fields.items():
                setattr(record, key, value)
        return True


class LogContext:
    """Tag every record that reaches the package handlers with ``fields``
    while the context is open. Contexts nest; inner fields win.

    Example:
        with LogContext(dataset="embryo_01"):
            unit, active = build(source)
    """

    _stack: List['LogContext'] = []
    _filter = _ContextFilter()

    def __init__(self, **fields: Any):
        self.fields = fields

    @classmethod
    def _targets(cls) -> List[logging.Filterer]:
        # Records from module loggers skip the package logger's own filters
        # and only meet its handlers.
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        return [package_logger, *package_logger.handlers]

    def __enter__(self) -> 'LogContext':
        LogContext._stack.append(self)
        for target in self._targets():
            target.addFilter(self._filter)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        LogContext._stack.remove(self)
        if not LogContext._stack:
            for target in self._targets():
                target.removeFilter(self._filter)

    @classmethod
    def current(cls) -> Optional['LogContext']:
        """Innermost open context, or None."""
        return cls._stack[-1] if cls._stack else None


def configure_default_logging(verbose: bool = False) -> logging.Logger:
    """Console logging at DEBUG when ``verbose``, otherwise INFO."""
    return setup_logging(level=logging.DEBUG if verbose else logging.INFO)
