"""Tests for scope parsing and categorization.

Run with: pytest tests/test_scopes.py -v
"""

from __future__ import annotations

import itertools
import re

from scope_auditor.audit.scopes import (
    OTHER_CATEGORY,
    SCOPE_CATEGORY_RULES,
    ScopeCategoryRule,
    categorize_scope,
    categorize_scopes,
    parse_scopes,
)


# ---------------------------------------------------------------------------
# parse_scopes
# ---------------------------------------------------------------------------


def test_parse_scopes_splits_and_trims():
    assert parse_scopes(" chat:write , files:read,users:read ") == ["chat:write", "files:read", "users:read"]


def test_parse_scopes_drops_empty_tokens():
    assert parse_scopes("chat:write,,  ,files:read,") == ["chat:write", "files:read"]


def test_parse_scopes_none_and_empty_return_empty_list():
    assert parse_scopes(None) == []
    assert parse_scopes("") == []
    assert parse_scopes(" , ") == []


def test_parse_scopes_keeps_duplicates_and_order():
    assert parse_scopes("b,a,b") == ["b", "a", "b"]


# ---------------------------------------------------------------------------
# categorize_scopes
# ---------------------------------------------------------------------------


def test_categorize_scopes_alphabetical_with_other_last():
    result = categorize_scopes(["chat:write", "admin.users", "bogus:thing"])

    assert [(c.name, c.scopes) for c in result.categories] == [
        ("Admin", ["admin.users"]),
        ("Chat", ["chat:write"]),
        ("Other", ["bogus:thing"]),
    ]
    assert result.total == 3


def test_categorize_scopes_other_last_even_when_lexically_later_names_exist():
    result = categorize_scopes(["zzz:unknown", "users:read", "usergroups:read"])
    assert [c.name for c in result.categories] == ["Usergroups", "Users", "Other"]


def test_categorize_scopes_deduplicates_but_total_counts_duplicates():
    result = categorize_scopes(["chat:write", "chat:write", "files:read", "chat:write"])

    assert [(c.name, c.scopes) for c in result.categories] == [
        ("Chat", ["chat:write"]),
        ("Files", ["files:read"]),
    ]
    assert result.total == 4


def test_categorize_scopes_sorts_scopes_within_category():
    result = categorize_scopes(["groups:read", "channels:write", "channels:history"])
    assert result.categories[0].name == "Channels"
    assert result.categories[0].scopes == ["channels:history", "channels:write", "groups:read"]


def test_categorize_scopes_empty_input():
    result = categorize_scopes([])
    assert result.categories == []
    assert result.total == 0


def test_categorize_scopes_is_order_independent():
    scopes = ["chat:write", "im:history", "admin.users", "bogus", "mpim:read", "chat:write"]
    expected = categorize_scopes(scopes)
    for permutation in itertools.permutations(scopes):
        assert categorize_scopes(list(permutation)) == expected


def test_categorize_scope_known_prefixes():
    assert categorize_scope("im:history") == "Direct Messages"
    assert categorize_scope("mpim:write") == "Direct Messages"
    assert categorize_scope("workflow.steps:execute") == "Workflow"
    assert categorize_scope("metadata.message:read") == "Metadata"
    assert categorize_scope("commands") == "Commands"
    assert categorize_scope("incoming-webhook") == OTHER_CATEGORY


def test_categorize_scope_requires_prefix_at_start():
    assert categorize_scope("xchat:write") == OTHER_CATEGORY
    # A dot-delimited namespace does not match a colon rule and vice versa.
    assert categorize_scope("admin:read") == OTHER_CATEGORY


def test_categorize_scope_first_matching_rule_wins():
    rules = (
        ScopeCategoryRule(name="Broad", pattern=re.compile(r"^chat")),
        ScopeCategoryRule(name="Narrow", pattern=re.compile(r"^chat:write")),
    )
    assert categorize_scope("chat:write", rules) == "Broad"

    result = categorize_scopes(["chat:write", "other"], rules)
    assert [c.name for c in result.categories] == ["Broad", "Other"]


def test_builtin_rules_are_ordered_and_unique():
    names = [rule.name for rule in SCOPE_CATEGORY_RULES]
    assert len(names) == 20
    assert len(set(names)) == len(names)
    assert names[0] == "Channels"
    assert names[-1] == "Metadata"
    assert OTHER_CATEGORY not in names
