"""Subject kinds and well-known resource types.

Provides:
- ``SubjectKind`` — node kinds in the inheritance graph (user / role).
- ``ResourceType`` — common resource type names.
"""

from __future__ import annotations

from enum import Enum


class SubjectKind(str, Enum):
    """Kind tag of a subject node.

    Users and roles share one node type; the merge algorithm does not
    distinguish them apart from the ``multi_subject`` switch, which only
    limits users.
    """

    USER = "user"
    ROLE = "role"


class ResourceType:
    """Common resource type names.

    The engine treats resource types as opaque strings; these are
    shortcuts for the types most integrations use.
    """

    POST = "post"
    PAGE = "page"
    TERM = "term"
    TAXONOMY = "taxonomy"

    ALL = frozenset({"post", "page", "term", "taxonomy"})


__all__ = [
    "ResourceType",
    "SubjectKind",
]
