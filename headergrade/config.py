"""Configuration loading and scoring-table validation."""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Mapping

import yaml

from .models import SCORED_CATEGORIES, Category, Severity
from .registry import DEFAULT_WEIGHTS


logger = logging.getLogger(__name__)

VERSION = "1.0.0"

DEFAULTS: dict[str, Any] = {
    "http": {
        "timeout": 10,
        "max_redirects": 5,
        "user_agent": f"HeaderGrade/{VERSION}",
        "method": "GET",
        "verify_tls": True,
    },
    "scan": {"max_workers": 4},
    "weights": DEFAULT_WEIGHTS,
    "scoring": {
        "category_contributions": {"essential": 60, "advanced": 25, "cors": 15},
        "misconfiguration_penalties": {"high": 0.8, "medium": 0.6, "low": 0.3, "info": 0.1},
        "disclosure_penalties": {"high": 3, "medium": 2, "low": 1, "info": 0},
        "cookie_penalties": {"high": 4, "medium": 2, "low": 1, "info": 0.5},
        "max_disclosure_penalty": 10,
        "max_cookie_penalty": 10,
        "grade_thresholds": {"A": 90, "B": 80, "C": 70, "D": 60, "E": 50},
    },
}


class ConfigError(ValueError):
    """Raised when a configuration file or table is invalid."""


# tables a user file replaces wholesale instead of merging key by key
REPLACED_TABLES = ("grade_thresholds",)


def _merge(defaults: dict, data: Mapping) -> dict:
    merged = copy.deepcopy(defaults)
    for key, value in data.items():
        is_table = isinstance(merged.get(key), dict)
        if value is None and is_table:
            # a bare "http:" keeps the defaults
            continue
        if is_table and not isinstance(value, Mapping):
            raise ConfigError(f"{key} must be a mapping, got {type(value).__name__}")
        if key in REPLACED_TABLES:
            merged[key] = dict(value)
        elif is_table:
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str | None = "config.yaml") -> dict[str, Any]:
    """Load YAML config merged over defaults. Returns defaults if file missing."""
    if not path:
        return copy.deepcopy(DEFAULTS)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug("Config file %s not found, using defaults", path)
        return copy.deepcopy(DEFAULTS)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return copy.deepcopy(DEFAULTS)
    if not isinstance(data, Mapping):
        raise ConfigError(f"{path}: top level must be a mapping")
    config = _merge(DEFAULTS, data)
    # fail at load time, not on the first scan
    scoring_config(config)
    return config


@dataclass(frozen=True)
class ScoringConfig:
    """Validated scoring tables used by the evaluation engine."""
    weights: Mapping[str, Mapping[str, float]]
    category_contributions: Mapping[Category, float]
    misconfiguration_penalties: Mapping[Severity, float]
    disclosure_penalties: Mapping[Severity, float]
    cookie_penalties: Mapping[Severity, float]
    max_disclosure_penalty: float
    max_cookie_penalty: float
    grade_thresholds: tuple[tuple[str, float], ...]

    @classmethod
    def default(cls) -> "ScoringConfig":
        return scoring_config(DEFAULTS)


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{what} must be a number, got {value!r}")
    return value


def _severity_table(table: Mapping, what: str, *, upper: float | None = None) -> dict[Severity, float]:
    result = {}
    for key, value in table.items():
        try:
            severity = Severity(str(key).lower())
        except ValueError:
            raise ConfigError(f"{what}: unknown severity {key!r}") from None
        value = _number(value, f"{what}.{key}")
        if value < 0 or (upper is not None and value > upper):
            bound = f"between 0 and {upper}" if upper is not None else "non-negative"
            raise ConfigError(f"{what}.{key} must be {bound}, got {value}")
        result[severity] = value
    return result


def _validate_weights(weights: Mapping) -> dict[str, dict[str, float]]:
    result = {}
    for category, table in weights.items():
        if category not in DEFAULT_WEIGHTS:
            raise ConfigError(f"weights: unknown category {category!r}")
        result[category] = {}
        for header, weight in (table or {}).items():
            header = str(header).lower()
            if header not in DEFAULT_WEIGHTS[category]:
                raise ConfigError(f"weights.{category}: unknown header {header!r}")
            weight = _number(weight, f"weights.{category}.{header}")
            if weight < 0:
                raise ConfigError(f"weights.{category}.{header} must be non-negative")
            result[category][header] = weight
    return result


def scoring_config(config: Mapping[str, Any]) -> ScoringConfig:
    """Build a ScoringConfig from a loaded config dict, validating every table."""
    merged = _merge(DEFAULTS, config)
    scoring = merged["scoring"]

    contributions = {}
    for name, value in scoring["category_contributions"].items():
        try:
            category = Category(name)
        except ValueError:
            category = None
        if category not in SCORED_CATEGORIES:
            raise ConfigError(f"category_contributions: unknown category {name!r}")
        contributions[category] = _number(value, f"category_contributions.{name}")
        if contributions[category] < 0:
            raise ConfigError(f"category_contributions.{name} must be non-negative")
    total = sum(contributions.values())
    if abs(total - 100) > 1e-9:
        raise ConfigError(f"category_contributions must sum to 100, got {total}")

    thresholds = []
    for grade, value in scoring["grade_thresholds"].items():
        value = _number(value, f"grade_thresholds.{grade}")
        if not 0 <= value <= 100:
            raise ConfigError(f"grade_thresholds.{grade} must be between 0 and 100")
        thresholds.append((str(grade), value))
    thresholds.sort(key=lambda t: t[1], reverse=True)

    max_disclosure = _number(scoring["max_disclosure_penalty"], "max_disclosure_penalty")
    max_cookie = _number(scoring["max_cookie_penalty"], "max_cookie_penalty")
    if max_disclosure < 0 or max_cookie < 0:
        raise ConfigError("penalty caps must be non-negative")

    return ScoringConfig(
        weights=_validate_weights(merged["weights"]),
        category_contributions=contributions,
        misconfiguration_penalties=_severity_table(
            scoring["misconfiguration_penalties"], "misconfiguration_penalties", upper=1
        ),
        disclosure_penalties=_severity_table(scoring["disclosure_penalties"], "disclosure_penalties"),
        cookie_penalties=_severity_table(scoring["cookie_penalties"], "cookie_penalties"),
        max_disclosure_penalty=max_disclosure,
        max_cookie_penalty=max_cookie,
        grade_thresholds=tuple(thresholds),
    )
