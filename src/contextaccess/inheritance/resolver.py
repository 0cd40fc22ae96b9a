"""Merge resolver — effective access settings for a subject on a resource.

Walks the subject graph from a subject up to its roots, resolves (and
caches) every ancestor independently, merges the settings of sibling
parents under the configured preference and finally applies the
subject's own explicit settings.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable, Optional

from ..config import InheritanceConfig, MergePreference, PreferenceSource
from ..exceptions import ConfigurationError, InheritanceCycleError, ProviderError
from ..logging import get_resolution_logger
from .cache import ResolutionCache
from .graph import Subject, SubjectGraph
from .merge import MergeRules, merge_settings, overlay_settings
from .provider import RawSettings, ResourceKey, SettingsProvider

logger = get_resolution_logger(__name__)


class MergeResolver:
    """Resolve effective settings through multi-parent inheritance.

    Args:
        graph: Parent relationships between users and roles. Must be acyclic.
        provider: Source of explicit raw settings.
        config: Merge preference source (default: fresh :class:`InheritanceConfig`).
            If it exposes ``multi_subject = False``, users only inherit from
            their first role.
        cache: Resolution cache (default: private :class:`ResolutionCache`).
        rules: Restriction rule table used by the merge.
        strict: Raise on an invalid merge preference instead of falling back
            to ``deny``.

    Example::

        resolver = MergeResolver(graph, provider)
        resolver.save_settings(Subject.role("editor"), ResourceKey("post", 1), {"hidden": True})
        resolver.resolve(Subject.user(1), ResourceKey("post", 1))
        # {"hidden": True}
    """

    def __init__(
        self,
        graph: SubjectGraph,
        provider: SettingsProvider,
        config: Optional[PreferenceSource] = None,
        cache: Optional[ResolutionCache] = None,
        rules: Optional[MergeRules] = None,
        strict: bool = False,
    ) -> None:
        self.graph = graph
        self.provider = provider
        self.config = config if config is not None else InheritanceConfig()
        self.cache = cache if cache is not None else ResolutionCache()
        self.rules = rules or MergeRules()
        self.strict = strict
        self.diagnostics: list[ConfigurationError] = []

    # ── Resolution ──────────────────────────────────────

    def resolve(self, subject: Subject, key: ResourceKey, *, inherit: bool = True) -> dict[str, Any]:
        """Effective settings of ``subject`` for ``key``.

        With ``inherit=False`` only the subject's own explicit settings are
        returned, uncached.

        Raises:
            InheritanceCycleError: If ``subject`` is its own transitive ancestor.
            ConfigurationError: Invalid merge preference and ``strict`` is set.
        """
        if not inherit:
            return self._own(subject, key)

        preference = self.preference_for(key.resource_type)
        return self._walk(subject, key, preference)

    def _walk(self, root: Subject, key: ResourceKey, preference: MergePreference) -> dict[str, Any]:
        # Iterative post-order walk; depth is bounded only by the graph.
        generation = self.cache.generation
        resolved: dict[Subject, dict[str, Any]] = {}
        expanding: set[Subject] = set()
        stack: list[tuple[Subject, bool]] = [(root, False)]

        while stack:
            node, expanded = stack.pop()

            if expanded:
                expanding.discard(node)
                effective = self._combine(node, key, [resolved[p] for p in self._parents_of(node)], preference)
                self.cache.put(node, key, effective, preference, generation)
                resolved[node] = effective
                continue

            if node in resolved:
                continue
            if node in expanding:
                raise InheritanceCycleError(
                    f"Subject {node} inherits from itself",
                    subject=str(node),
                    resource=str(key),
                )

            cached = self.cache.get(node, key, preference)
            if cached is not None:
                resolved[node] = cached
                continue

            logger.debug("Cache miss", subject=node, resource=key)
            expanding.add(node)
            stack.append((node, True))
            for parent in reversed(self._parents_of(node)):
                if parent not in resolved:
                    stack.append((parent, False))

        return resolved[root]

    def _combine(
        self,
        subject: Subject,
        key: ResourceKey,
        inherited: list[dict[str, Any]],
        preference: MergePreference,
    ) -> dict[str, Any]:
        own = self._own(subject, key)
        if not inherited:
            return own
        return overlay_settings(merge_settings(inherited, preference, self.rules), own)

    def _own(self, subject: Subject, key: ResourceKey) -> RawSettings:
        raw = self.provider.get_raw(subject, key)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ProviderError(
                f"Settings provider returned {type(raw).__name__} for {subject} on {key}",
                subject=str(subject),
                resource=str(key),
            )
        return copy.deepcopy(raw)

    def _parents_of(self, subject: Subject) -> tuple[Subject, ...]:
        parents = self.graph.parents(subject)
        if subject.is_user and not getattr(self.config, "multi_subject", True):
            return parents[:1]
        return parents

    def preference_for(self, resource_type: str) -> MergePreference:
        """Current merge preference for ``resource_type``.

        An invalid configured value is recorded in :attr:`diagnostics`,
        logged, and replaced by ``deny`` unless the resolver is strict.
        """
        try:
            return self.config.get_preference(resource_type)
        except ConfigurationError as e:
            if self.strict:
                raise
            self.diagnostics.append(e)
            logger.warning(
                "%s; falling back to '%s'",
                e.message,
                MergePreference.DENY.value,
                extra={"error_code": e.code, "error_details": e.details},
            )
            return MergePreference.DENY

    # ── Writes & invalidation ───────────────────────────
    #
    # Editing the graph directly leaves cached entries stale; use the
    # parent helpers below or call reset_all() afterwards.

    def save_settings(self, subject: Subject, key: ResourceKey, settings: RawSettings) -> bool:
        """Store explicit settings and invalidate the subject and its descendants."""
        saved = self.provider.set_raw(subject, key, settings)
        if saved:
            self.invalidate_subject(subject)
        return saved

    def update_option_item(self, subject: Subject, key: ResourceKey, option: str, value: Any) -> bool:
        """Set one option in the subject's explicit settings and save them."""
        settings = self._own(subject, key)
        settings[option] = copy.deepcopy(value)
        return self.save_settings(subject, key, settings)

    def delete_settings(self, subject: Subject, key: ResourceKey) -> bool:
        """Remove the subject's explicit settings; it inherits everything again."""
        deleted = self.provider.delete_raw(subject, key)
        if deleted:
            self.invalidate_subject(subject)
        return deleted

    def set_parents(self, subject: Subject, parents: Iterable[Subject]) -> None:
        """Replace the parents of ``subject`` and invalidate it and its descendants."""
        self.graph.add_subject(subject, parents)
        self.invalidate_subject(subject)

    def assign_parent(self, subject: Subject, parent: Subject) -> None:
        self.graph.assign_parent(subject, parent)
        self.invalidate_subject(subject)

    def remove_parent(self, subject: Subject, parent: Subject) -> None:
        self.graph.remove_parent(subject, parent)
        self.invalidate_subject(subject)

    def invalidate_subject(self, subject: Subject) -> int:
        return self.cache.invalidate_subject(subject, self.graph)

    def reset_all(self) -> None:
        """Drop every cached effective settings entry."""
        self.cache.reset()


__all__ = [
    "MergeResolver",
]
