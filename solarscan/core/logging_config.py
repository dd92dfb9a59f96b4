"""Logging setup for analysis runs.

Each analysis request runs inside a ``CorrelationContext``; a filter copies
the active request ID onto every record, so lines emitted from batch worker
threads can be grouped per image. Output is either human-readable text or
one JSON object per line.
"""
import json
import logging
import logging.handlers
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

NO_CORRELATION_ID = 'no-correlation-id'

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ('PIL', 'ultralytics')

correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

# Attributes every LogRecord has; anything else was passed through ``extra=``
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {
    'message', 'asctime', 'correlation_id', 'taskName',
}


class CorrelationIDFilter(logging.Filter):
    """Stamp the active request ID on each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'correlation_id': getattr(record, 'correlation_id', NO_CORRELATION_ID),
            'thread': record.threadName,
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }
        extra = {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}
        if extra:
            entry['extra'] = extra
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Plain text with the request ID between level and message."""

    def __init__(self, include_correlation_id: bool = True):
        fmt = '%(asctime)s - %(name)s - %(levelname)s'
        if include_correlation_id:
            fmt += ' - [%(correlation_id)s]'
        super().__init__(fmt + ' - %(message)s')


class LoggingManager:
    """Owns the root handlers installed for the application.

    ``configure`` is idempotent until ``shutdown`` is called.
    """

    def __init__(self):
        self._configured = False
        self._handlers: Dict[str, logging.Handler] = {}

    @property
    def is_configured(self) -> bool:
        return self._configured

    def configure(
        self,
        log_level: str = 'INFO',
        log_dir: Optional[Union[str, Path]] = None,
        enable_file_logging: bool = False,
        enable_console_logging: bool = True,
        structured_logging: bool = False,
        max_file_size: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        application_name: str = 'solarscan'
    ) -> None:
        """Install console and/or rotating file handlers on the root logger.

        Args:
            log_level: Level name for the root logger and its handlers
            log_dir: Directory for ``<application_name>.log`` and
                ``<application_name>-errors.log`` (default ``logs``)
            enable_file_logging: Write rotating log files
            enable_console_logging: Write to stdout
            structured_logging: JSON lines instead of plain text
            max_file_size: Bytes per log file before rotation
            backup_count: Rotated files kept per log
            application_name: Stem of the log file names
        """
        if self._configured:
            return

        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {log_level}")

        formatter = StructuredFormatter() if structured_logging else HumanReadableFormatter()
        root = logging.getLogger()
        root.setLevel(level)
        root.handlers.clear()

        if enable_console_logging:
            self._attach('console', logging.StreamHandler(sys.stdout), level, formatter)

        if enable_file_logging:
            directory = Path(log_dir or 'logs')
            directory.mkdir(parents=True, exist_ok=True)
            for name, filename, handler_level in (
                ('application', f'{application_name}.log', level),
                ('errors', f'{application_name}-errors.log', logging.ERROR),
            ):
                handler = logging.handlers.RotatingFileHandler(
                    directory / filename, maxBytes=max_file_size,
                    backupCount=backup_count, encoding='utf-8')
                self._attach(name, handler, handler_level, formatter)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        self._configured = True
        logging.getLogger(__name__).info(
            f"Logging configured: level={log_level.upper()} handlers={sorted(self._handlers)}")

    def _attach(self, name: str, handler: logging.Handler, level: int,
                formatter: logging.Formatter) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(CorrelationIDFilter())
        logging.getLogger().addHandler(handler)
        self._handlers[name] = handler

    def shutdown(self) -> None:
        """Detach and close the installed handlers."""
        root = logging.getLogger()
        for handler in self._handlers.values():
            root.removeHandler(handler)
            handler.close()
        self._handlers.clear()
        self._configured = False


logging_manager = LoggingManager()


def configure_logging(**kwargs) -> None:
    logging_manager.configure(**kwargs)


def configure_logging_from_config(config) -> None:
    """Configure logging from the logging fields of a ``Config``."""
    logging_manager.configure(
        log_level=config.log_level,
        log_dir=config.log_dir,
        enable_file_logging=config.enable_file_logging,
        structured_logging=config.structured_logging,
    )


def set_correlation_id(corr_id: Optional[str] = None) -> str:
    """Set (or generate) the request ID for the current context."""
    corr_id = corr_id or uuid.uuid4().hex[:12]
    correlation_id.set(corr_id)
    return corr_id


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


class CorrelationContext:
    """Scope a request ID; the previous one is restored on exit."""

    def __init__(self, corr_id: Optional[str] = None):
        self.corr_id = corr_id
        self._token = None

    def __enter__(self) -> str:
        corr_id = self.corr_id or uuid.uuid4().hex[:12]
        self._token = correlation_id.set(corr_id)
        return corr_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        correlation_id.reset(self._token)


def with_correlation_id(corr_id: Optional[str] = None):
    """Run the decorated function inside its own ``CorrelationContext``."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            with CorrelationContext(corr_id):
                return func(*args, **kwargs)
        return wrapper
    return decorator


@contextmanager
def log_stage(logger: logging.Logger, stage: str) -> Iterator[None]:
    """Log the wall time of one pipeline stage at DEBUG."""
    start = time.perf_counter()
    try:
        yield
    finally:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{stage} took {(time.perf_counter() - start) * 1000.0:.2f} ms")
