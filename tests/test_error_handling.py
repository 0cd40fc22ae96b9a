"""Tests for the exception hierarchy and error registry."""

from __future__ import annotations

import pytest

from contextaccess import (
    ConfigurationError,
    ContextAccessError,
    InheritanceCycleError,
    ProviderError,
    StorageError,
    SubjectGraphError,
)
from contextaccess.exceptions import error_registry, register_error


class TestExceptionHierarchy:
    """Tests for error codes and details."""

    def test_default_message_and_code(self) -> None:
        err = ContextAccessError()
        assert err.code == "INTERNAL_ERROR"
        assert str(err) == "An internal error occurred"
        assert err.details == {}

    def test_custom_message_and_details(self) -> None:
        err = ConfigurationError("bad value", value="maybe")
        assert err.message == "bad value"
        assert err.code == "CONFIGURATION_ERROR"
        assert err.details == {"value": "maybe"}

    def test_code_override(self) -> None:
        assert ProviderError("down", code="BACKEND_DOWN").code == "BACKEND_DOWN"

    def test_cycle_is_a_graph_error(self) -> None:
        err = InheritanceCycleError(subject="role:a")
        assert isinstance(err, SubjectGraphError)
        assert isinstance(err, ContextAccessError)
        assert err.code == "INHERITANCE_CYCLE"

    def test_storage_is_a_provider_error(self) -> None:
        with pytest.raises(ProviderError):
            raise StorageError("write failed")


class TestErrorRegistry:
    """Tests for mapping codes to exception classes."""

    def test_base_errors_registered(self) -> None:
        assert error_registry.get("CONFIGURATION_ERROR") is ConfigurationError
        assert error_registry.get("INHERITANCE_CYCLE") is InheritanceCycleError
        assert error_registry.get("STORAGE_ERROR") is StorageError
        assert error_registry.get("NOPE") is None

    def test_register_custom_error(self) -> None:
        @register_error("SNAPSHOT_ERROR")
        class SnapshotError(ProviderError):
            code = "SNAPSHOT_ERROR"

        assert error_registry.get("SNAPSHOT_ERROR") is SnapshotError
        assert "SNAPSHOT_ERROR" in error_registry.all()
