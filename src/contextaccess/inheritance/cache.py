"""Resolution cache for effective settings.

Memoizes effective settings per (subject, resource). Entries become stale
when raw settings of the subject or any of its ancestors change; callers
invalidate through :meth:`ResolutionCache.invalidate_subject` or drop
everything with :meth:`ResolutionCache.reset`, which is always safe.

Every invalidation bumps :attr:`ResolutionCache.generation`. A resolution
passes the generation it started under to :meth:`ResolutionCache.put`, so a
value computed before an invalidation is never stored after it.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Optional

from .graph import Subject, SubjectGraph
from .provider import ResourceKey

logger = logging.getLogger(__name__)

CacheKey = tuple[Subject, ResourceKey]


class ResolutionCache:
    """Thread-safe map of (subject, resource) → effective settings.

    The lock is held only inside each method, never while settings are
    being resolved, so concurrent resolutions of different pairs do not
    block each other. Values are copied on the way in and out.

    Entries may be tagged with the merge preference they were computed
    under; a lookup with a different preference is a miss.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: dict[CacheKey, tuple[Optional[str], dict[str, Any]]] = {}
        self._generation = 0
        self.hits = 0
        self.misses = 0

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(
        self,
        subject: Subject,
        key: ResourceKey,
        preference: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        with self._lock:
            entry = self._entries.get((subject, key))
            if entry is None or (preference is not None and entry[0] != preference):
                self.misses += 1
                return None
            self.hits += 1
            return copy.deepcopy(entry[1])

    def put(
        self,
        subject: Subject,
        key: ResourceKey,
        settings: dict[str, Any],
        preference: Optional[str] = None,
        generation: Optional[int] = None,
    ) -> bool:
        """Store ``settings`` for the pair.

        Args:
            preference: Merge preference the value was computed under.
            generation: :attr:`generation` read before the value was
                computed. The write is dropped if an invalidation happened
                since.

        Returns:
            Whether the value was stored.
        """
        snapshot = copy.deepcopy(settings)
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Dropped stale cache write for %s on %s", subject, key)
                return False
            self._entries[(subject, key)] = (preference, snapshot)
            return True

    def invalidate_subject(self, subject: Subject, graph: Optional[SubjectGraph] = None) -> int:
        """Drop every entry of ``subject`` and, given a graph, of its descendants.

        Returns:
            Number of entries removed.
        """
        affected = {subject}
        if graph is not None:
            affected.update(graph.descendants(subject))
        with self._lock:
            self._generation += 1
            stale = [entry for entry in self._entries if entry[0] in affected]
            for entry in stale:
                del self._entries[entry]
        logger.debug("Invalidated %d cached entries for %s", len(stale), subject)
        return len(stale)

    def invalidate_resource(self, key: ResourceKey) -> int:
        """Drop every entry for one resource, whatever the subject."""
        with self._lock:
            self._generation += 1
            stale = [entry for entry in self._entries if entry[1] == key]
            for entry in stale:
                del self._entries[entry]
        return len(stale)

    def reset(self) -> None:
        """Clear all entries and counters."""
        with self._lock:
            self._generation += 1
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __contains__(self, entry: object) -> bool:
        with self._lock:
            return entry in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = [
    "CacheKey",
    "ResolutionCache",
]
