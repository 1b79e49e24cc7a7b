"""Configuration module for the assignment engine."""

from .settings import AssignmentSettings, CapacitySettings, Settings, get_settings

__all__ = [
    "AssignmentSettings",
    "CapacitySettings",
    "Settings",
    "get_settings",
]
