import pytest

from headergrade.models import Category, HeaderRule, Severity
from headergrade.registry import HeaderRegistry, build_registry


def test_lookup_is_case_insensitive():
    registry = build_registry()
    rule = registry.lookup("Strict-Transport-Security")
    assert rule.key == "strict-transport-security"
    assert rule.weight == 15
    assert "NEL" in registry
    assert registry.lookup("x-not-a-header") is None


def test_analyzer_owned_rules_are_not_scored():
    registry = build_registry()
    scored = registry.scored_rules()

    assert len(scored) == 22
    assert all(r.category in (Category.ESSENTIAL, Category.ADVANCED, Category.CORS) for r in scored)
    assert registry.lookup("set-cookie").category == Category.COOKIE
    assert registry.lookup("x-powered-by").category == Category.DISCLOSURE
    assert len(registry.rules_in(Category.DISCLOSURE)) == 19
    assert all(r.weight == 0 for r in registry.rules_in(Category.DISCLOSURE))


def test_default_category_totals():
    registry = build_registry()
    assert registry.total_weight(Category.ESSENTIAL) == 75
    assert registry.total_weight(Category.ADVANCED) == 25
    assert registry.total_weight(Category.CORS) == 15


def test_all_rules_order_is_stable():
    first = [r.key for r in build_registry().all_rules()]
    assert first == [r.key for r in build_registry().all_rules()]
    assert first[0] == "strict-transport-security"


def test_weight_overrides():
    registry = build_registry({"cors": {"access-control-max-age": 4}})
    assert registry.lookup("access-control-max-age").weight == 4
    assert registry.total_weight(Category.CORS) == 18


def test_rule_keys_are_lowercased_and_unique():
    rule = HeaderRule(
        key="X-Test", name="X-Test", description="", recommendation="",
        severity=Severity.LOW, category=Category.ESSENTIAL, weight=1,
    )
    registry = HeaderRegistry([rule])
    assert registry.lookup("x-test").key == "x-test"
    with pytest.raises(ValueError):
        HeaderRegistry([rule, rule])
