"""Option-level merging of access settings.

Provides:
- ``MergeRules`` — which option values count as restrictions.
- ``merge_settings()`` — combine the settings of sibling subjects under a preference.
- ``overlay_settings()`` — apply a subject's own settings over inherited ones.

Settings are mappings of option name to a scalar or a nested mapping::

    {"hidden": True, "limited": {"enabled": True, "threshold": 10}}

An option is a *restriction flag* when its value is a boolean, or a mapping
whose ``flag_field`` (``"enabled"`` by default) is a boolean. Conflicting
flags are decided by the merge preference; every other value is decided by
source priority.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, Field

from ..config import MergePreference


class MergeRules(BaseModel):
    """Restriction rule table consulted while merging.

    Args:
        flag_field: Key holding the restriction flag inside composite options.
        restrictive_values: Per option, which boolean means "restricted".
        default_restrictive: Restrictive boolean for options not listed.
        implicit_allow: Under the ``allow`` preference, a sibling that does
            not set a flagged option counts as allowing it.

    Example::

        rules = MergeRules(restrictive_values={"visible": False})
        rules.is_restricted("visible", False)   # True
        rules.is_restricted("hidden", True)     # True (default)
    """

    flag_field: str = Field(default="enabled", min_length=1)
    restrictive_values: dict[str, bool] = Field(default_factory=dict)
    default_restrictive: bool = True
    implicit_allow: bool = True

    model_config = {"extra": "forbid", "frozen": True}

    def restrictive_value(self, option: str) -> bool:
        return self.restrictive_values.get(option, self.default_restrictive)

    def effect(self, value: Any) -> Optional[bool]:
        """Flag carried by an option value, or None for non-flag values."""
        if isinstance(value, bool):
            return value
        if isinstance(value, Mapping):
            flag = value.get(self.flag_field)
            if isinstance(flag, bool):
                return flag
        return None

    def is_restricted(self, option: str, value: Any) -> bool:
        effect = self.effect(value)
        return effect is not None and effect == self.restrictive_value(option)


DEFAULT_MERGE_RULES = MergeRules()


def merge_settings(
    sources: Iterable[Optional[Mapping[str, Any]]],
    preference: MergePreference | str = MergePreference.DENY,
    rules: Optional[MergeRules] = None,
) -> dict[str, Any]:
    """Merge the settings of sibling subjects into one mapping.

    Sources are the effective settings of a subject's parents, in parent
    order; ``None`` counts as an empty mapping. For every option in the
    union of keys:

    1. Defined once: passes through unchanged.
    2. Conflicting restriction flags: ``deny`` keeps the restrictive value,
       ``allow`` the permissive one. Parent order never decides a flag.
    3. Under ``allow`` (with ``rules.implicit_allow``), a source that does
       not set a flagged option counts as permissive.
    4. Composite options merge their remaining fields with the same rules,
       so nested flags follow the preference too; other nested values come
       from the sources whose flag won first, then from the others.
    5. Everything else: nested mappings merge key by key; scalars come
       from the first source that defines them.

    Args:
        sources: Settings mappings in priority order.
        preference: Merge preference for the resource type.
        rules: Restriction rule table (default: :data:`DEFAULT_MERGE_RULES`).

    Returns:
        A new dict; inputs are never mutated.

    Example::

        merge_settings(
            [{"hidden": True}, {"hidden": False}],
            MergePreference.DENY,
        )
        # {"hidden": True}

        merge_settings(
            [{"limited": {"enabled": True, "threshold": 10}}, {}],
            MergePreference.ALLOW,
        )
        # {"limited": {"enabled": False, "threshold": 10}}
    """
    rules = rules or DEFAULT_MERGE_RULES
    preference = MergePreference.parse(preference)
    mappings = [source or {} for source in sources]

    if len(mappings) == 1:
        return copy.deepcopy(dict(mappings[0]))

    merged: dict[str, Any] = {}
    for key in _union_keys(mappings):
        values = [mapping[key] for mapping in mappings if key in mapping]
        missing = len(mappings) - len(values)
        merged[key] = _merge_option(key, values, missing, preference, rules)
    return merged


def _merge_option(
    option: str,
    values: list[Any],
    missing: int,
    preference: MergePreference,
    rules: MergeRules,
) -> Any:
    effects = [rules.effect(value) for value in values]
    flags = {effect for effect in effects if effect is not None}

    if not flags:
        if len(values) > 1 and all(isinstance(value, Mapping) for value in values):
            return merge_settings(values, preference, rules)
        return copy.deepcopy(values[0])

    restrictive = rules.restrictive_value(option)
    if preference is MergePreference.ALLOW and rules.implicit_allow and (missing or None in effects):
        flags.add(not restrictive)

    if len(flags) == 1:
        effect = flags.pop()
    elif preference is MergePreference.DENY:
        effect = restrictive
    else:
        effect = not restrictive

    ordered = [v for v, e in zip(values, effects) if e == effect]
    ordered += [v for v, e in zip(values, effects) if e != effect]

    composites = [value for value in ordered if isinstance(value, Mapping)]
    if not composites:
        return effect

    # Nested fields follow the same rules; a source without the field
    # (or with a bare boolean for the option) counts as missing it.
    sources = len(values) + missing
    result: dict[str, Any] = {}
    for field in _union_keys(composites):
        if field == rules.flag_field:
            result[field] = effect
            continue
        nested = [composite[field] for composite in composites if field in composite]
        result[field] = _merge_option(field, nested, sources - len(nested), preference, rules)
    result.setdefault(rules.flag_field, effect)
    return result


def _union_keys(mappings: Iterable[Mapping[str, Any]]) -> list[str]:
    keys: list[str] = []
    for mapping in mappings:
        for key in mapping:
            if key not in keys:
                keys.append(key)
    return keys


def overlay_settings(
    inherited: Optional[Mapping[str, Any]],
    own: Optional[Mapping[str, Any]],
) -> dict[str, Any]:
    """Apply a subject's own explicit settings over inherited settings.

    Own values replace inherited ones; nested mappings are overlaid key by
    key, so ``{"limited": {"enabled": False}}`` over
    ``{"limited": {"enabled": True, "threshold": 10}}`` keeps the threshold.
    """
    result = copy.deepcopy(dict(inherited or {}))
    for key, value in (own or {}).items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = overlay_settings(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


__all__ = [
    "DEFAULT_MERGE_RULES",
    "MergeRules",
    "merge_settings",
    "overlay_settings",
]
