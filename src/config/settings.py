"""Application settings using Pydantic Settings.

Centralized configuration for the assignment and capacity engine.

Every tunable of the engine lives here so the scoring weights and capacity
defaults can be changed per deployment without touching code:
- ASSIGNMENT_*: assignee scoring weights and prompt rendering limits
- CAPACITY_*: weekly capacity defaults and workload windows
- APP_*: application name, environment and logging
"""

import logging
from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class AssignmentSettings(BaseSettings):
    """Assignee scoring configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ASSIGNMENT_",
        extra="ignore",
    )

    # Point weights
    phase_fit_weight: Decimal = Field(
        default=Decimal("3"),
        description="Bonus when the member's role fits the task's phase",
    )
    text_fit_weight: Decimal = Field(
        default=Decimal("2"),
        description="Bonus when the member's role fits the task title/description",
    )
    task_load_penalty: Decimal = Field(
        default=Decimal("0.1"),
        description="Penalty per task already assigned to the member",
    )
    overworked_penalty: Decimal = Field(
        default=Decimal("2"),
        description="Penalty for members flagged as overworked",
    )

    # Selection
    min_selection_score: Decimal = Field(
        default=Decimal("0"),
        description="A candidate must score strictly above this to be recommended",
    )

    # Prompt rendering
    description_preview_chars: int = Field(
        default=50,
        ge=0,
        description="Role description characters shown per member in prompts",
    )

    @field_validator(
        "phase_fit_weight",
        "text_fit_weight",
        "task_load_penalty",
        "overworked_penalty",
    )
    @classmethod
    def weights_must_be_non_negative(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("scoring weights must be non-negative")
        return value


class CapacitySettings(BaseSettings):
    """Weekly capacity configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CAPACITY_",
        extra="ignore",
    )

    default_max_hours_per_week: Decimal = Field(
        default=Decimal("40"),
        description="Maximum weekly hours used when a member has no capacity profile",
    )
    default_hours_per_week: Decimal = Field(
        default=Decimal("40"),
        description="Default weekly hours used when a member has no capacity profile",
    )
    max_hours_ceiling: Decimal = Field(
        default=Decimal("168"),
        description="Upper bound accepted for any weekly hours value",
    )
    respect_start_date: bool = Field(
        default=False,
        description="Exclude allocations that have not started yet as of the snapshot date",
    )
    default_weeks_until_due: int = Field(
        default=4,
        ge=1,
        description="Weeks assumed when a member's tasks carry no due dates",
    )

    @model_validator(mode="after")
    def defaults_fit_within_ceiling(self) -> "CapacitySettings":
        if self.default_max_hours_per_week > self.max_hours_ceiling:
            raise ValueError("default_max_hours_per_week exceeds max_hours_ceiling")
        if self.default_hours_per_week > self.default_max_hours_per_week:
            raise ValueError("default_hours_per_week cannot exceed default_max_hours_per_week")
        return self


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="Project Assignment Engine", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(default=False, description="Emit JSON formatted logs")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    # Nested settings (loaded separately)
    @property
    def assignment(self) -> AssignmentSettings:
        return AssignmentSettings()

    @property
    def capacity(self) -> CapacitySettings:
        return CapacitySettings()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment in ("production", "prod", "staging")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Cached settings loaded from environment.
    """
    return Settings()
