"""Tests for option-level settings merge."""

from __future__ import annotations

import copy

import pytest

from contextaccess import (
    ConfigurationError,
    MergePreference,
    MergeRules,
    merge_settings,
    overlay_settings,
)

DENY = MergePreference.DENY
ALLOW = MergePreference.ALLOW


class TestMergeRules:
    """Tests for the restriction rule table."""

    def test_effect_of_boolean(self) -> None:
        rules = MergeRules()
        assert rules.effect(True) is True
        assert rules.effect(False) is False

    def test_effect_of_composite(self) -> None:
        rules = MergeRules()
        assert rules.effect({"enabled": True, "threshold": 1}) is True
        assert rules.effect({"threshold": 1}) is None

    def test_non_flag_values_have_no_effect(self) -> None:
        rules = MergeRules()
        assert rules.effect("/redirect") is None
        assert rules.effect(10) is None
        assert rules.effect({"enabled": 1}) is None

    def test_custom_flag_field(self) -> None:
        rules = MergeRules(flag_field="on")
        assert rules.effect({"on": True}) is True
        assert rules.effect({"enabled": True}) is None

    def test_restrictive_values(self) -> None:
        rules = MergeRules(restrictive_values={"visible": False})
        assert rules.is_restricted("visible", False)
        assert not rules.is_restricted("visible", True)
        assert rules.is_restricted("hidden", True)
        assert not rules.is_restricted("redirect", "/login")


class TestMergeSettings:
    """Tests for merging the settings of sibling subjects."""

    def test_union_without_conflict(self) -> None:
        result = merge_settings(
            [
                {"limited": {"enabled": True, "threshold": 1}},
                {"hidden": False},
            ]
        )
        assert result == {"limited": {"enabled": True, "threshold": 1}, "hidden": False}
        assert list(result) == ["limited", "hidden"]

    def test_deny_preference_conflict(self) -> None:
        assert merge_settings([{"hidden": True}, {"hidden": False}], DENY) == {"hidden": True}
        assert merge_settings([{"hidden": False}, {"hidden": True}], DENY) == {"hidden": True}

    def test_allow_preference_conflict(self) -> None:
        assert merge_settings([{"hidden": True}, {"hidden": False}], ALLOW) == {"hidden": False}
        assert merge_settings([{"hidden": False}, {"hidden": True}], ALLOW) == {"hidden": False}

    def test_preference_accepts_string(self) -> None:
        assert merge_settings([{"hidden": True}, {"hidden": False}], "allow") == {"hidden": False}

    def test_allow_treats_missing_sibling_as_permissive(self) -> None:
        """A sibling with no settings lifts the restriction under 'allow'."""
        result = merge_settings([{"limited": {"enabled": True, "threshold": 10}}, {}], ALLOW)
        assert result == {"limited": {"enabled": False, "threshold": 10}}

    def test_allow_without_implicit_allow(self) -> None:
        rules = MergeRules(implicit_allow=False)
        result = merge_settings([{"limited": {"enabled": True, "threshold": 10}}, {}], ALLOW, rules)
        assert result == {"limited": {"enabled": True, "threshold": 10}}

    def test_deny_passes_through_missing_keys(self) -> None:
        result = merge_settings([{"limited": {"enabled": True, "threshold": 10}}, {}], DENY)
        assert result == {"limited": {"enabled": True, "threshold": 10}}

    def test_none_source_is_empty(self) -> None:
        assert merge_settings([None, {"hidden": True}], DENY) == {"hidden": True}
        assert merge_settings([None, {"hidden": True}], ALLOW) == {"hidden": False}

    def test_composite_fields_follow_winning_flag(self) -> None:
        sources = [
            {"limited": {"enabled": True, "threshold": 1}},
            {"limited": {"enabled": False, "threshold": 10}},
        ]
        assert merge_settings(sources, DENY) == {"limited": {"enabled": True, "threshold": 1}}
        assert merge_settings(sources, ALLOW) == {"limited": {"enabled": False, "threshold": 10}}
        assert merge_settings(list(reversed(sources)), DENY) == {"limited": {"enabled": True, "threshold": 1}}

    def test_composite_fields_first_seen_on_tie(self) -> None:
        """Equal flags: nested fields merge independently, first source first."""
        result = merge_settings(
            [
                {"limited": {"enabled": True, "threshold": 1}},
                {"limited": {"enabled": True, "threshold": 5, "period": "day"}},
            ],
            DENY,
        )
        assert result == {"limited": {"enabled": True, "threshold": 1, "period": "day"}}

    def test_nested_flags_follow_preference(self) -> None:
        sources = [
            {"limited": {"enabled": True, "notify": False}},
            {"limited": {"enabled": True, "notify": True}},
        ]
        assert merge_settings(sources, DENY) == {"limited": {"enabled": True, "notify": True}}
        assert merge_settings(sources, ALLOW) == {"limited": {"enabled": True, "notify": False}}
        assert merge_settings(list(reversed(sources)), DENY) == {"limited": {"enabled": True, "notify": True}}

    def test_bare_flag_against_composite_keeps_fields(self) -> None:
        sources = [{"limited": True}, {"limited": {"enabled": False, "threshold": 5}}]
        assert merge_settings(sources, DENY) == {"limited": {"enabled": True, "threshold": 5}}
        assert merge_settings(sources, ALLOW) == {"limited": {"enabled": False, "threshold": 5}}

    def test_non_flag_scalar_conflict_uses_source_priority(self) -> None:
        sources = [{"redirect": "/a"}, {"redirect": "/b"}]
        assert merge_settings(sources, DENY) == {"redirect": "/a"}
        assert merge_settings(sources, ALLOW) == {"redirect": "/a"}

    def test_non_flag_mappings_merge_key_by_key(self) -> None:
        result = merge_settings([{"meta": {"a": 1}}, {"meta": {"b": 2, "a": 3}}], DENY)
        assert result == {"meta": {"a": 1, "b": 2}}

    def test_flags_nested_in_plain_mappings(self) -> None:
        result = merge_settings(
            [{"comment": {"hidden": True}}, {"comment": {"hidden": False}}],
            DENY,
        )
        assert result == {"comment": {"hidden": True}}

    def test_positive_option_semantics(self) -> None:
        """An option whose restrictive value is False inverts the rule."""
        rules = MergeRules(restrictive_values={"visible": False})
        sources = [{"visible": True}, {"visible": False}]
        assert merge_settings(sources, DENY, rules) == {"visible": False}
        assert merge_settings(sources, ALLOW, rules) == {"visible": True}

    def test_single_source_is_a_copy(self) -> None:
        source = {"limited": {"enabled": True, "threshold": 1}}
        result = merge_settings([source], ALLOW)
        assert result == source
        result["limited"]["threshold"] = 99
        assert source["limited"]["threshold"] == 1

    def test_inputs_not_mutated(self) -> None:
        sources = [
            {"limited": {"enabled": True, "threshold": 10}},
            {"hidden": False},
            {},
        ]
        snapshot = copy.deepcopy(sources)
        merge_settings(sources, ALLOW)
        merge_settings(sources, DENY)
        assert sources == snapshot

    def test_empty_sources(self) -> None:
        assert merge_settings([]) == {}
        assert merge_settings([{}, {}]) == {}

    def test_invalid_preference(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid merge preference"):
            merge_settings([{"hidden": True}], "maybe")

    def test_same_inputs_same_output(self) -> None:
        sources = [
            {"hidden": True, "limited": {"enabled": False, "threshold": 3}},
            {"hidden": False, "limited": {"enabled": True, "threshold": 7}, "redirect": "/x"},
        ]
        assert merge_settings(sources, DENY) == merge_settings(copy.deepcopy(sources), DENY)


class TestOverlaySettings:
    """Tests for applying own settings over inherited ones."""

    def test_own_value_wins(self) -> None:
        assert overlay_settings({"hidden": True}, {"hidden": False}) == {"hidden": False}

    def test_nested_overlay_keeps_inherited_fields(self) -> None:
        result = overlay_settings(
            {"limited": {"enabled": True, "threshold": 10}},
            {"limited": {"enabled": False}},
        )
        assert result == {"limited": {"enabled": False, "threshold": 10}}

    def test_union_of_keys(self) -> None:
        assert overlay_settings({"hidden": True}, {"redirect": "/a"}) == {"hidden": True, "redirect": "/a"}

    def test_none_inputs(self) -> None:
        assert overlay_settings(None, None) == {}
        assert overlay_settings(None, {"hidden": True}) == {"hidden": True}

    def test_inputs_not_mutated(self) -> None:
        inherited = {"limited": {"enabled": True, "threshold": 10}}
        own = {"limited": {"enabled": False}}
        overlay_settings(inherited, own)
        assert inherited == {"limited": {"enabled": True, "threshold": 10}}
        assert own == {"limited": {"enabled": False}}
