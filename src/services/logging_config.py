"""
Logging Configuration for the Assignment & Capacity Engine.

Provides structured logging with:
- JSON formatting for production
- Human-readable formatting for development
- Project context attached to every record logged inside a batch
- Decision logging for assignment audit trails
- Performance timing
"""

import logging
import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable, Iterable, Iterator
from functools import wraps
from pathlib import Path
from contextvars import ContextVar

# Project being processed by the current batch, if any
project_id_var: ContextVar[Optional[str]] = ContextVar('project_id', default=None)


@contextmanager
def project_context(project_id: Optional[str]) -> Iterator[None]:
    """Tag every log record emitted inside the block with ``project_id``."""
    if project_id is None:
        yield
        return
    token = project_id_var.set(project_id)
    try:
        yield
    finally:
        project_id_var.reset(token)


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Context and ``extra_data`` fields carried by a record."""
    fields: Dict[str, Any] = {}
    project_id = getattr(record, 'project_id', None) or project_id_var.get()
    if project_id:
        fields["project_id"] = project_id
    fields.update(getattr(record, 'extra_data', None) or {})
    return fields


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record.

    ``static_fields`` (application name, version, environment) are written
    on every line so log aggregators can tell deployments apart.
    """

    def __init__(self, static_fields: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        log_data.update(self.static_fields)
        log_data.update(_record_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """Single-line colored output for development."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
        fields = _record_fields(record)
        project_id = fields.pop("project_id", None)

        scope = f"{record.name}@{project_id}" if project_id else record.name
        message = f"{timestamp} {color}{record.levelname:8s}{reset} [{scope}] {record.getMessage()}"
        if fields:
            message += " | " + ' | '.join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that merges fixed context into each record's ``extra_data``.

    The active project is stamped on the record when the call is made, so
    handlers that format later still see it.
    """

    def process(self, msg: str, kwargs: Dict) -> tuple:
        extra = dict(kwargs.get('extra') or {})
        extra_data = dict(self.extra)
        extra_data.update(extra.get('extra_data') or {})
        extra['extra_data'] = extra_data

        project_id = project_id_var.get()
        if project_id:
            extra['project_id'] = project_id

        kwargs['extra'] = extra
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None,
    static_fields: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, console output is JSON
        log_file: Optional file path; file output is always JSON
        static_fields: Fields added to every JSON line
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter(static_fields) if json_output else ReadableFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter(static_fields))
        root_logger.addHandler(file_handler)


def configure_from_settings(settings=None) -> None:
    """
    Configure logging from application settings.

    Production-like environments always log JSON.
    """
    if settings is None:
        from config.settings import get_settings
        settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_output=settings.json_logs or settings.is_production,
        static_fields={
            "app": settings.name,
            "version": settings.version,
            "environment": settings.environment,
        },
    )


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs

    Returns:
        ContextLogger instance
    """
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, extra)


class AssignmentDecisionLogger:
    """
    Specialized logger for assignee recommendations.

    Records, per decision:
    - Candidate scores
    - The chosen member (or that the task was left unassigned)
    - Tokens from external text generation that could not be reconciled

    Holds no per-call state, so one instance can be shared across threads.
    """

    def __init__(self, name: str = "assignment.decisions"):
        self.logger = get_logger(name)

    def log_candidates(self, task_title: str, candidates: Iterable[Any]) -> None:
        """Log the ranked candidate scores for a task."""
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        self.logger.debug(
            f"Scored candidates for task: {task_title}",
            extra={'extra_data': {
                'task_title': task_title,
                'scores': {c.member_id: str(c.score) for c in candidates},
            }}
        )

    def log_decision(
        self,
        task_title: str,
        member_id: Optional[str],
        score: Any = None,
        used_fallback: bool = False,
    ) -> None:
        """Log the outcome of a recommendation."""
        if member_id is None:
            self.logger.info(
                f"No suitable assignee for task: {task_title}",
                extra={'extra_data': {'task_title': task_title}}
            )
            return
        self.logger.info(
            f"Recommended assignee for task: {task_title}",
            extra={'extra_data': {
                'task_title': task_title,
                'member_id': member_id,
                'score': str(score) if score is not None else None,
                'used_fallback': used_fallback,
            }}
        )

    def log_rejected_token(self, token: str) -> None:
        """Log an assignee token that matched no roster member."""
        self.logger.warning(
            f"Unrecognized assignee token: {token}",
            extra={'extra_data': {'token': token}}
        )


def log_performance(name: Optional[str] = None) -> Callable:
    """
    Decorator to log function performance.

    Args:
        name: Optional name override for the log entry

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable:
        func_name = name or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger("performance")
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = int((time.perf_counter() - start) * 1000)
                logger.error(
                    f"{func_name} failed",
                    extra={'extra_data': {
                        'duration_ms': duration_ms,
                        'error': str(e),
                    }}
                )
                raise
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.debug(
                f"{func_name} completed",
                extra={'extra_data': {'duration_ms': duration_ms}}
            )
            return result

        return wrapper

    return decorator
