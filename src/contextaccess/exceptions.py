"""Unified exception hierarchy for contextaccess.

All errors raised by the inheritance engine inherit from ContextAccessError.
This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to exception classes

Usage:
    from contextaccess.exceptions import (
        ContextAccessError,
        ConfigurationError,
        InheritanceCycleError,
    )

Integrations may define thin subclasses for their own failures:
    @register_error("MY_STORE_ERROR")
    class MyStoreError(StorageError):
        code = "MY_STORE_ERROR"
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "ContextAccessError",
    "ConfigurationError",
    "SubjectGraphError",
    "InheritanceCycleError",
    "ProviderError",
    "StorageError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class ContextAccessError(Exception):
    """Base exception for contextaccess.

    Attributes:
        code: Stable error code string (e.g. "CONFIGURATION_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(ContextAccessError):
    """Invalid or missing configuration (e.g. unknown merge preference)."""

    code: str = "CONFIGURATION_ERROR"
    message: str = "Invalid configuration"


class SubjectGraphError(ContextAccessError):
    """Malformed subject graph edit."""

    code: str = "SUBJECT_GRAPH_ERROR"
    message: str = "Invalid subject graph"


class InheritanceCycleError(SubjectGraphError):
    """A subject is its own transitive ancestor."""

    code: str = "INHERITANCE_CYCLE"
    message: str = "Cyclic subject inheritance"


class ProviderError(ContextAccessError):
    """Settings provider failure."""

    code: str = "PROVIDER_ERROR"


class StorageError(ProviderError):
    """Specific error for raw settings storage operations."""

    code: str = "STORAGE_ERROR"


# ---- Error Registry ----------------------------------------------------------

_E = TypeVar("_E", bound=type[ContextAccessError])


class ErrorRegistry:
    """Registry for mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[ContextAccessError]] = {}

    def register(self, code: str, error_cls: type[ContextAccessError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[ContextAccessError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[ContextAccessError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("MY_CUSTOM_ERROR")
        class MyCustomError(ContextAccessError):
            code = "MY_CUSTOM_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", ContextAccessError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("SUBJECT_GRAPH_ERROR", SubjectGraphError)
error_registry.register("INHERITANCE_CYCLE", InheritanceCycleError)
error_registry.register("PROVIDER_ERROR", ProviderError)
error_registry.register("STORAGE_ERROR", StorageError)
