"""Catalogue of recognised headers, built once and shared read-only."""

from dataclasses import replace
from typing import Iterable, Mapping

from .checks import (
    ADVANCED_RULES,
    CORS_RULES,
    DISCLOSURE_RULES,
    ESSENTIAL_RULES,
    SET_COOKIE_RULE,
)
from .models import Category, HeaderRule


class HeaderRegistry:
    """Lookup of header rules by lowercase name, in registration order."""

    def __init__(self, rules: Iterable[HeaderRule]):
        self._rules: dict[str, HeaderRule] = {}
        for rule in rules:
            key = rule.key.lower()
            if key in self._rules:
                raise ValueError(f"Duplicate header rule: {key}")
            self._rules[key] = rule if rule.key == key else replace(rule, key=key)

    def lookup(self, name: str) -> HeaderRule | None:
        return self._rules.get(name.lower())

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def all_rules(self) -> tuple[HeaderRule, ...]:
        return tuple(self._rules.values())

    def scored_rules(self) -> tuple[HeaderRule, ...]:
        """Rules evaluated one by one; analyzer-owned categories are excluded."""
        return tuple(r for r in self._rules.values() if r.scored)

    def rules_in(self, category: Category) -> tuple[HeaderRule, ...]:
        return tuple(r for r in self._rules.values() if r.category == category)

    def total_weight(self, category: Category) -> float:
        return sum(r.weight for r in self.rules_in(category))


def build_registry(weights: Mapping[str, Mapping[str, float]] | None = None) -> HeaderRegistry:
    """Merge the rule groups, applying per-header weight overrides by category."""
    weights = weights or {}
    groups = (
        (Category.ESSENTIAL, ESSENTIAL_RULES),
        (Category.ADVANCED, ADVANCED_RULES),
        (Category.CORS, CORS_RULES),
    )
    rules = []
    for category, group in groups:
        overrides = weights.get(category.value) or {}
        for rule in group:
            if rule.key in overrides:
                rule = replace(rule, weight=overrides[rule.key])
            rules.append(rule)
    rules.append(SET_COOKIE_RULE)
    rules.extend(DISCLOSURE_RULES)
    return HeaderRegistry(rules)


DEFAULT_WEIGHTS = {
    category.value: {r.key: r.weight for r in group}
    for category, group in (
        (Category.ESSENTIAL, ESSENTIAL_RULES),
        (Category.ADVANCED, ADVANCED_RULES),
        (Category.CORS, CORS_RULES),
    )
}
