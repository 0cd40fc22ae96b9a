"""Subject graph — users and roles with ordered, multi-parent inheritance.

Provides:
- ``Subject`` — immutable (kind, id) identity used as a graph node and cache key.
- ``SubjectGraph`` — arena of subjects with ordered parent lists (a DAG).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from ..exceptions import SubjectGraphError
from .constants import SubjectKind

SubjectId = Union[int, str]


@dataclass(frozen=True)
class Subject:
    """A user or role node.

    Example::

        editor = Subject.role("editor")
        alice = Subject.user(42)
        str(alice)  # "user:42"
    """

    kind: SubjectKind
    id: SubjectId

    @classmethod
    def user(cls, user_id: SubjectId) -> Subject:
        return cls(SubjectKind.USER, user_id)

    @classmethod
    def role(cls, role_id: SubjectId) -> Subject:
        return cls(SubjectKind.ROLE, role_id)

    @property
    def is_user(self) -> bool:
        return self.kind == SubjectKind.USER

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


class SubjectGraph:
    """Ordered parent adjacency for users and roles.

    A user may carry several roles and a role may inherit from several
    parent roles, so the graph is a DAG rather than a tree. Parent order is
    preserved and significant for source priority during merges.

    The graph must stay acyclic. It does not check this on insertion;
    :class:`~contextaccess.inheritance.resolver.MergeResolver` raises
    :class:`~contextaccess.exceptions.InheritanceCycleError` when it walks
    into a cycle.

    Example::

        graph = SubjectGraph()
        graph.add_subject(Subject.role("editor"), parents=[Subject.role("author")])
        graph.add_subject(Subject.user(1), parents=[Subject.role("editor"), Subject.role("subscriber")])
        graph.parents(Subject.user(1))   # (role:editor, role:subscriber)
    """

    def __init__(self) -> None:
        self._parents: dict[Subject, list[Subject]] = {}
        self._children: dict[Subject, list[Subject]] = {}

    # ── Edits ───────────────────────────────────────────

    def add_subject(self, subject: Subject, parents: Iterable[Subject] = ()) -> None:
        """Register ``subject`` and replace its parent list.

        Parents are registered implicitly; duplicates keep their first
        position.

        Raises:
            SubjectGraphError: If ``subject`` lists itself as a parent.
        """
        ordered: list[Subject] = []
        for parent in parents:
            if parent == subject:
                raise SubjectGraphError(f"Subject {subject} cannot inherit from itself", subject=str(subject))
            if parent not in ordered:
                ordered.append(parent)

        self._register(subject)
        for old_parent in self._parents[subject]:
            self._children[old_parent].remove(subject)

        self._parents[subject] = ordered
        for parent in ordered:
            self._register(parent)
            self._children[parent].append(subject)

    def assign_parent(self, subject: Subject, parent: Subject) -> None:
        """Append ``parent`` to the parents of ``subject`` (no-op if present)."""
        if parent == subject:
            raise SubjectGraphError(f"Subject {subject} cannot inherit from itself", subject=str(subject))
        self._register(subject)
        self._register(parent)
        if parent not in self._parents[subject]:
            self._parents[subject].append(parent)
            self._children[parent].append(subject)

    def remove_parent(self, subject: Subject, parent: Subject) -> None:
        """Drop the ``subject`` → ``parent`` edge if it exists."""
        if parent in self._parents.get(subject, ()):
            self._parents[subject].remove(parent)
            self._children[parent].remove(subject)

    def _register(self, subject: Subject) -> None:
        if subject not in self._parents:
            self._parents[subject] = []
            self._children[subject] = []

    # ── Queries ─────────────────────────────────────────

    def parents(self, subject: Subject) -> tuple[Subject, ...]:
        """Direct parents in assignment order; empty for roots and unknown subjects."""
        return tuple(self._parents.get(subject, ()))

    def children(self, subject: Subject) -> tuple[Subject, ...]:
        return tuple(self._children.get(subject, ()))

    def siblings(self, subject: Subject) -> tuple[Subject, ...]:
        """Other subjects sharing at least one parent with ``subject``.

        Ordered by parent order, then by the order children were attached.
        """
        result: list[Subject] = []
        for parent in self._parents.get(subject, ()):
            for child in self._children[parent]:
                if child != subject and child not in result:
                    result.append(child)
        return tuple(result)

    def ancestors(self, subject: Subject) -> tuple[Subject, ...]:
        """All transitive parents, breadth-first, without duplicates."""
        return self._walk(subject, self._parents)

    def descendants(self, subject: Subject) -> tuple[Subject, ...]:
        """All transitive children, breadth-first, without duplicates."""
        return self._walk(subject, self._children)

    @staticmethod
    def _walk(start: Subject, edges: dict[Subject, list[Subject]]) -> tuple[Subject, ...]:
        seen: list[Subject] = []
        visited = {start}
        queue = deque(edges.get(start, ()))
        while queue:
            node = queue.popleft()
            if node in visited:
                continue
            visited.add(node)
            seen.append(node)
            queue.extend(edges.get(node, ()))
        return tuple(seen)

    def subjects(self) -> tuple[Subject, ...]:
        return tuple(self._parents)

    def __contains__(self, subject: object) -> bool:
        return subject in self._parents

    def __len__(self) -> int:
        return len(self._parents)

    def __iter__(self) -> Iterator[Subject]:
        return iter(tuple(self._parents))


__all__ = [
    "Subject",
    "SubjectGraph",
    "SubjectId",
]
