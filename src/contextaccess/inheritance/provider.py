"""Raw settings storage contract and an in-memory implementation.

Provides:
- ``ResourceKey`` — (resource type, resource id) identity.
- ``SettingsProvider`` — protocol the resolver reads raw settings through.
- ``InMemorySettingsProvider`` — lock-guarded dict store for tests and embedding.
"""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union, runtime_checkable

from .graph import Subject

logger = logging.getLogger(__name__)

RawSettings = dict[str, Any]


@dataclass(frozen=True)
class ResourceKey:
    """Identity of the thing access settings apply to.

    Example::

        ResourceKey("post", 10)
        ResourceKey.of("page", "about")
    """

    resource_type: str
    resource_id: Union[int, str]

    @classmethod
    def of(cls, resource_type: str, resource_id: Union[int, str]) -> ResourceKey:
        return cls(resource_type, resource_id)

    def __str__(self) -> str:
        return f"{self.resource_type}:{self.resource_id}"


@runtime_checkable
class SettingsProvider(Protocol):
    """Source of explicit, unmerged settings per (subject, resource).

    Implementations must hand out snapshots: a mapping returned from
    ``get_raw`` must never change afterwards, whatever is written later.
    """

    def get_raw(self, subject: Subject, key: ResourceKey) -> Optional[RawSettings]: ...

    def set_raw(self, subject: Subject, key: ResourceKey, settings: RawSettings) -> bool: ...

    def delete_raw(self, subject: Subject, key: ResourceKey) -> bool: ...


class InMemorySettingsProvider:
    """Dict-backed :class:`SettingsProvider`.

    Stores and returns deep copies, so neither the caller's input nor the
    returned snapshot can alias stored data. ``reads`` counts ``get_raw``
    calls.
    """

    def __init__(self, initial: Optional[dict[tuple[Subject, ResourceKey], RawSettings]] = None) -> None:
        self._lock = threading.Lock()
        self._data: dict[tuple[Subject, ResourceKey], RawSettings] = {}
        self.reads = 0
        for (subject, key), settings in (initial or {}).items():
            self.set_raw(subject, key, settings)

    def get_raw(self, subject: Subject, key: ResourceKey) -> Optional[RawSettings]:
        with self._lock:
            self.reads += 1
            stored = self._data.get((subject, key))
            return copy.deepcopy(stored) if stored is not None else None

    def set_raw(self, subject: Subject, key: ResourceKey, settings: RawSettings) -> bool:
        if not isinstance(settings, dict):
            logger.warning("Rejected non-mapping settings for %s on %s: %r", subject, key, type(settings))
            return False
        with self._lock:
            self._data[(subject, key)] = copy.deepcopy(settings)
        return True

    def delete_raw(self, subject: Subject, key: ResourceKey) -> bool:
        with self._lock:
            return self._data.pop((subject, key), None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


__all__ = [
    "InMemorySettingsProvider",
    "RawSettings",
    "ResourceKey",
    "SettingsProvider",
]
