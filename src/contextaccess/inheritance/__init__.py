"""Access settings inheritance for users and roles.

Defines:
- Subject / SubjectGraph: users and roles with ordered, multi-parent inheritance
- ResourceKey / SettingsProvider: raw settings per (subject, resource)
- MergeRules / merge_settings(): option-level merge of sibling settings
- ResolutionCache: memoized effective settings with explicit invalidation
- MergeResolver: effective settings for a subject on a resource
"""

from .cache import ResolutionCache
from .constants import ResourceType, SubjectKind
from .graph import Subject, SubjectGraph
from .merge import (
    DEFAULT_MERGE_RULES,
    MergeRules,
    merge_settings,
    overlay_settings,
)
from .provider import (
    InMemorySettingsProvider,
    RawSettings,
    ResourceKey,
    SettingsProvider,
)
from .resolver import MergeResolver

__all__ = [
    "DEFAULT_MERGE_RULES",
    "InMemorySettingsProvider",
    "MergeResolver",
    "MergeRules",
    "RawSettings",
    "ResolutionCache",
    "ResourceKey",
    "ResourceType",
    "SettingsProvider",
    "Subject",
    "SubjectGraph",
    "SubjectKind",
    "merge_settings",
    "overlay_settings",
]
