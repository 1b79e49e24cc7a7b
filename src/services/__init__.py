"""
Services Module - Infrastructure services for the assignment engine.

- Logging and observability
"""

from .logging_config import (
    configure_logging,
    configure_from_settings,
    get_logger,
    log_performance,
    project_context,
    AssignmentDecisionLogger,
)

__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "log_performance",
    "project_context",
    "AssignmentDecisionLogger",
]
