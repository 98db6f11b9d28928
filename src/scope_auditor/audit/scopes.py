"""Scope string parsing and display categorization.

Slack reports the scopes affected by a change as one comma-delimited
string. parse_scopes() turns that into a list; categorize_scopes() groups a
list of scopes into display buckets using an ordered rule table.

Rule order matters: a scope is assigned to the first rule whose pattern
matches it, so a scope matching two rules always lands in the earlier one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from scope_auditor.audit.events import CategorizedScopes, ScopeCategory

OTHER_CATEGORY = "Other"


@dataclass(frozen=True)
class ScopeCategoryRule:
    """Immutable rule assigning scopes to a display category.

    Attributes:
        name: Category name shown to the user.
        pattern: Compiled regex tested with match() against each scope.
    """

    name: str
    pattern: re.Pattern[str]

    def matches(self, scope: str) -> bool:
        """Return True if the scope belongs to this category."""
        return self.pattern.match(scope) is not None


def _rule(name: str, pattern: str) -> ScopeCategoryRule:
    return ScopeCategoryRule(name=name, pattern=re.compile(pattern))


# Evaluated top to bottom, first match wins.
SCOPE_CATEGORY_RULES: tuple[ScopeCategoryRule, ...] = (
    _rule("Channels", r"^(channels|groups):"),
    _rule("Chat", r"^chat:"),
    _rule("Users", r"^users:"),
    _rule("Files", r"^files:"),
    _rule("Reactions", r"^reactions:"),
    _rule("Pins", r"^pins:"),
    _rule("Bookmarks", r"^bookmarks:"),
    _rule("Reminders", r"^reminders:"),
    _rule("Search", r"^search:"),
    _rule("Team", r"^team:"),
    _rule("Usergroups", r"^usergroups:"),
    _rule("Workflow", r"^workflow\."),
    _rule("Admin", r"^admin\."),
    _rule("Conversations", r"^conversations:"),
    _rule("Direct Messages", r"^(im|mpim):"),
    _rule("Commands", r"^commands"),
    _rule("Links", r"^links:"),
    _rule("Emoji", r"^emoji:"),
    _rule("Calls", r"^calls:"),
    _rule("Metadata", r"^metadata\."),
)


def parse_scopes(raw: str | None) -> list[str]:
    """Split a comma-delimited scope string into individual scopes.

    Whitespace around each scope is stripped and empty tokens are dropped.

    Args:
        raw: The scope string from a log entry, or None.

    Returns:
        Scopes in their original order. Empty for None or "".
    """
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def categorize_scope(scope: str, rules: tuple[ScopeCategoryRule, ...] = SCOPE_CATEGORY_RULES) -> str:
    """Return the name of the first category whose rule matches the scope.

    Args:
        scope: A single scope identifier.
        rules: Ordered rules to test.

    Returns:
        The category name, or "Other" if no rule matches.
    """
    for rule in rules:
        if rule.matches(scope):
            return rule.name
    return OTHER_CATEGORY


def categorize_scopes(
    scopes: list[str],
    rules: tuple[ScopeCategoryRule, ...] = SCOPE_CATEGORY_RULES,
) -> CategorizedScopes:
    """Group scopes into named display categories.

    Each category is deduplicated and sorted. Only non-empty categories are
    returned, ordered by name with "Other" always last. The total counts the
    input list as given, duplicates included, so it reflects raw volume
    rather than the number of distinct scopes displayed.

    Args:
        scopes: Scope identifiers, in any order.
        rules: Ordered rules to test; defaults to SCOPE_CATEGORY_RULES.

    Returns:
        CategorizedScopes with the grouped scopes and the input total.
    """
    buckets: dict[str, set[str]] = {}
    for scope in scopes:
        buckets.setdefault(categorize_scope(scope, rules), set()).add(scope)

    names = sorted(name for name in buckets if name != OTHER_CATEGORY)
    if OTHER_CATEGORY in buckets:
        names.append(OTHER_CATEGORY)

    return CategorizedScopes(
        categories=[ScopeCategory(name=name, scopes=sorted(buckets[name])) for name in names],
        total=len(scopes),
    )
