from pathlib import Path

import pytest

from headergrade.config import DEFAULTS, ConfigError, ScoringConfig, load_config, scoring_config
from headergrade.models import Category, Severity


ROOT = Path(__file__).resolve().parents[1]


def test_missing_file_returns_defaults(tmp_path):
    assert load_config(str(tmp_path / "nope.yaml")) == DEFAULTS


def test_empty_file_returns_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == DEFAULTS


def test_partial_file_is_merged_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("http:\n  timeout: 3\nscoring:\n  max_cookie_penalty: 5\n")
    config = load_config(str(path))

    assert config["http"]["timeout"] == 3
    assert config["http"]["user_agent"] == DEFAULTS["http"]["user_agent"]
    assert config["scoring"]["max_cookie_penalty"] == 5
    assert config["scoring"]["category_contributions"] == {"essential": 60, "advanced": 25, "cors": 15}


def test_bare_section_keeps_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("http:\nscan:\nscoring:\n")
    config = load_config(str(path))

    assert config["http"] == DEFAULTS["http"]
    assert config["scan"] == DEFAULTS["scan"]
    assert scoring_config(config) == ScoringConfig.default()


@pytest.mark.parametrize("text", ["http: 5\n", "scoring:\n  grade_thresholds: [90, 80]\n"])
def test_non_mapping_section_is_rejected(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    with pytest.raises(ConfigError, match="must be a mapping"):
        load_config(str(path))


def test_shipped_config_matches_defaults():
    config = load_config(str(ROOT / "config.yaml"))
    assert scoring_config(config) == ScoringConfig.default()


def test_contributions_must_sum_to_100_at_load_time(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("scoring:\n  category_contributions:\n    essential: 70\n")
    with pytest.raises(ConfigError, match="sum to 100"):
        load_config(str(path))


def test_rebalanced_contributions_are_accepted():
    config = scoring_config({"scoring": {"category_contributions": {"essential": 50, "advanced": 30, "cors": 20}}})
    assert config.category_contributions == {
        Category.ESSENTIAL: 50, Category.ADVANCED: 30, Category.CORS: 20,
    }


@pytest.mark.parametrize("override, message", [
    ({"scoring": {"category_contributions": {"cookies": 0}}}, "unknown category"),
    ({"weights": {"essential": {"x-made-up": 3}}}, "unknown header"),
    ({"weights": {"exotic": {}}}, "unknown category"),
    ({"weights": {"cors": {"access-control-max-age": -1}}}, "non-negative"),
    ({"scoring": {"misconfiguration_penalties": {"high": 1.5}}}, "between 0 and 1"),
    ({"scoring": {"misconfiguration_penalties": {"critical": 0.9}}}, "unknown severity"),
    ({"scoring": {"disclosure_penalties": {"low": "one"}}}, "must be a number"),
    ({"scoring": {"max_disclosure_penalty": -2}}, "non-negative"),
    ({"scoring": {"grade_thresholds": {"A": 120}}}, "between 0 and 100"),
])
def test_invalid_tables_are_rejected(override, message):
    with pytest.raises(ConfigError, match=message):
        scoring_config(override)


def test_invalid_yaml_raises_config_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("scoring: [unclosed\n")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_default_tables():
    config = ScoringConfig.default()
    assert config.misconfiguration_penalties[Severity.HIGH] == 0.8
    assert config.disclosure_penalties == {
        Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1, Severity.INFO: 0,
    }
    assert config.cookie_penalties[Severity.INFO] == 0.5
    assert [g for g, _ in config.grade_thresholds] == ["A", "B", "C", "D", "E"]
