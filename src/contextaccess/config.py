"""Configuration contract for the access inheritance engine.

Pydantic-validated settings consulted by the merge resolver: the
per-resource-type merge preference, the multiple-role switch and the
logging options. Direct os.environ/os.getenv usage is confined to
:func:`load_inheritance_config_from_env`.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MergePreference(str, Enum):
    """Tie-break rule for conflicting restriction flags across sibling subjects.

    - DENY: the more restrictive value wins (default)
    - ALLOW: the less restrictive value wins
    """

    DENY = "deny"
    ALLOW = "allow"

    @classmethod
    def parse(cls, value: str | MergePreference) -> MergePreference:
        """Convert a raw config value to a MergePreference.

        Raises:
            ConfigurationError: If the value is not ``deny`` or ``allow``.
        """
        if isinstance(value, MergePreference):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError(
            f"Invalid merge preference: {value!r}. Must be one of {[p.value for p in cls]}",
            value=value,
        )


@runtime_checkable
class PreferenceSource(Protocol):
    """Anything that can answer the merge preference for a resource type."""

    def get_preference(self, resource_type: str) -> MergePreference: ...


class InheritanceConfig(BaseModel):
    """Settings for access settings inheritance.

    Per-type preferences are kept as raw strings and validated when read,
    so a bad value set at runtime surfaces at resolution time instead of
    being silently coerced.

    Example::

        config = InheritanceConfig()
        config.get_preference("post")           # MergePreference.DENY
        config.set_preference("post", "allow")
        config.get_preference("post")           # MergePreference.ALLOW
    """

    # Merge
    default_preference: MergePreference = Field(
        default=MergePreference.DENY,
        description="Merge preference for resource types without an explicit entry",
    )
    preferences: dict[str, str] = Field(
        default_factory=dict,
        description="Raw merge preference per resource type (e.g. {'post': 'allow'})",
    )
    multi_subject: bool = Field(
        default=True,
        description="Merge settings from every role of a user. Disabled = first role only.",
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    @field_validator("default_preference", mode="before")
    @classmethod
    def validate_default_preference(cls, v: str | MergePreference) -> MergePreference:
        """Reject unknown default preferences up front."""
        try:
            return MergePreference.parse(v)
        except ConfigurationError as e:
            raise ValueError(e.message)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }

    def get_preference(self, resource_type: str) -> MergePreference:
        """Merge preference for ``resource_type``.

        Raises:
            ConfigurationError: If the stored value is not a known preference.
        """
        raw = self.preferences.get(resource_type)
        if raw is None:
            return self.default_preference
        try:
            return MergePreference.parse(raw)
        except ConfigurationError as e:
            raise ConfigurationError(
                f"Invalid merge preference for '{resource_type}': {raw!r}",
                resource_type=resource_type,
                value=raw,
            ) from e

    def set_preference(self, resource_type: str, preference: str | MergePreference) -> None:
        """Store the merge preference for ``resource_type`` as given."""
        value = preference.value if isinstance(preference, MergePreference) else preference
        self.preferences[resource_type] = value

    def clear_preference(self, resource_type: str) -> None:
        """Fall back to the default preference for ``resource_type``."""
        self.preferences.pop(resource_type, None)


def load_inheritance_config_from_env() -> InheritanceConfig:
    """Load inheritance configuration from environment variables.

    This is the ONLY place where os.getenv is allowed for these settings.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - MERGE_PREFERENCE: Default merge preference (deny/allow, default: deny)
    - MULTI_SUBJECT: Merge settings from all roles of a user (default: true)
    - MERGE_PREFERENCE_<TYPE>: Preference for one resource type,
      e.g. MERGE_PREFERENCE_POST=allow

    Returns:
        InheritanceConfig instance with values from environment or defaults.
    """
    import os

    prefix = "MERGE_PREFERENCE_"
    preferences = {
        name[len(prefix) :].lower(): value
        for name, value in os.environ.items()
        if name.startswith(prefix) and len(name) > len(prefix)
    }

    return InheritanceConfig(
        default_preference=os.getenv("MERGE_PREFERENCE", "deny"),
        preferences=preferences,
        multi_subject=os.getenv("MULTI_SUBJECT", "true").lower() in ("true", "1", "yes", "on"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
    )


__all__ = [
    "InheritanceConfig",
    "LogLevel",
    "MergePreference",
    "PreferenceSource",
    "load_inheritance_config_from_env",
]
