"""Evaluation and scoring engine.

``evaluate`` is a pure function of the header set, the registry and the
scoring tables: it keeps no state between calls and never raises on
well-formed input, so any number of evaluations can run in parallel.
"""

import logging
import math
from typing import Any, Iterable, Mapping

from .checks import analyze_cookies, analyze_disclosure
from .config import ScoringConfig
from .models import (
    SCORED_CATEGORIES,
    CategoryScore,
    ConfigIssue,
    Finding,
    HeaderRule,
    ScanResult,
    ScoreBreakdown,
    Severity,
    Status,
)
from .registry import HeaderRegistry, build_registry


logger = logging.getLogger(__name__)

MULTI_VALUE_HEADERS = ("set-cookie",)
DEFAULT_PENALTY_MULTIPLIER = 0.5


def _as_strings(value: Any) -> list[str]:
    # None carries no value at all, unlike an empty string
    values = value if isinstance(value, (list, tuple)) else [value]
    return [v.decode("latin-1") if isinstance(v, bytes) else str(v) for v in values if v is not None]


def normalize_headers(headers: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Lowercase header names; Set-Cookie becomes a tuple, other repeats are comma-joined.

    ``None`` values are dropped, so such a header is treated as absent.
    """
    items = headers.items() if isinstance(headers, Mapping) else headers
    normalized: dict[str, Any] = {}
    for name, value in items:
        key = str(name).strip().lower()
        values = _as_strings(value)
        if not values:
            continue
        if key in MULTI_VALUE_HEADERS:
            normalized[key] = normalized.get(key, ()) + tuple(values)
        elif key in normalized:
            normalized[key] = ", ".join([normalized[key], *values])
        else:
            normalized[key] = ", ".join(values)
    return normalized


def calculate_grade(score: float, thresholds: Iterable[tuple[str, float]]) -> str:
    """First grade whose threshold the score meets, testing highest first."""
    for grade, minimum in sorted(thresholds, key=lambda t: t[1], reverse=True):
        if score >= minimum:
            return grade
    return "F"


def _run_validator(rule: HeaderRule, value: str, headers: Mapping[str, Any]) -> ConfigIssue | None:
    try:
        return rule.validator(value, headers)
    except Exception as e:
        logger.warning("Validator for %s failed on %r: %s", rule.key, value, e)
        return ConfigIssue(
            issue=f"{rule.name} value could not be validated",
            recommendation=rule.recommendation,
            severity=Severity.LOW,
        )


def evaluate_rule(
    rule: HeaderRule,
    headers: Mapping[str, Any],
    multipliers: Mapping[Severity, float],
) -> Finding:
    value = headers.get(rule.key)
    if value is None or not str(value).strip():
        return Finding(
            header=rule.name,
            status=Status.MISSING,
            severity=rule.severity,
            category=rule.category,
            weight=rule.weight,
            points_earned=0,
            description=rule.description,
            recommendation=rule.recommendation,
        )

    value = str(value)
    issue = _run_validator(rule, value, headers) if rule.validator else None
    if issue is None:
        return Finding(
            header=rule.name,
            status=Status.PRESENT,
            severity=rule.severity,
            category=rule.category,
            weight=rule.weight,
            points_earned=rule.weight,
            value=value,
            description=rule.description,
        )

    severity = issue.severity or rule.severity
    multiplier = min(max(multipliers.get(severity, DEFAULT_PENALTY_MULTIPLIER), 0), 1)
    return Finding(
        header=rule.name,
        status=Status.MISCONFIGURED,
        severity=severity,
        category=rule.category,
        weight=rule.weight,
        points_earned=rule.weight * (1 - multiplier),
        value=value,
        description=rule.description,
        issue=issue.issue,
        recommendation=issue.recommendation,
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def evaluate(
    headers: Mapping[str, Any] | Iterable[tuple[str, Any]],
    *,
    target: str = "",
    status_code: int | None = None,
    registry: HeaderRegistry | None = None,
    config: ScoringConfig | None = None,
) -> ScanResult:
    """Turn a raw header set into findings, a 0-100 score and a grade."""
    config = config or ScoringConfig.default()
    registry = registry or build_registry(config.weights)
    normalized = normalize_headers(headers)

    findings = []
    earned = {c: 0.0 for c in SCORED_CATEGORIES}
    for rule in registry.scored_rules():
        finding = evaluate_rule(rule, normalized, config.misconfiguration_penalties)
        findings.append(finding)
        earned[rule.category] += finding.points_earned
        logger.debug(
            "%s: %s (earned %.1f of %s points)",
            rule.name, finding.status.value, finding.points_earned, rule.weight,
        )

    categories = {}
    for category in SCORED_CATEGORIES:
        total = registry.total_weight(category)
        percent = earned[category] / total if total > 0 else 0
        categories[category] = CategoryScore(
            earned=earned[category],
            total=total,
            weighted=percent * config.category_contributions.get(category, 0),
        )

    disclosure = analyze_disclosure(
        normalized,
        penalties=config.disclosure_penalties,
        max_penalty=config.max_disclosure_penalty,
    )
    findings.extend(disclosure.findings)

    cookie_penalty = 0
    if normalized.get("set-cookie"):
        cookies = analyze_cookies(
            normalized["set-cookie"],
            penalties=config.cookie_penalties,
            max_penalty=config.max_cookie_penalty,
        )
        findings.extend(cookies.findings)
        cookie_penalty = cookies.penalty

    raw = sum(c.weighted for c in categories.values()) - disclosure.penalty - cookie_penalty
    score = _round_half_up(min(max(raw, 0), 100))
    breakdown = ScoreBreakdown(
        essential=categories[SCORED_CATEGORIES[0]],
        advanced=categories[SCORED_CATEGORIES[1]],
        cors=categories[SCORED_CATEGORIES[2]],
        disclosure_penalty=disclosure.penalty,
        cookie_penalty=cookie_penalty,
        raw_score=raw,
    )
    for category, cat_score in categories.items():
        logger.debug(
            "%s headers: %.1f/%s (%.1f points)",
            category.value.capitalize(), cat_score.earned, cat_score.total, cat_score.weighted,
        )
    logger.debug(
        "Penalties: disclosure -%.1f, cookies -%.1f; final score %d",
        disclosure.penalty, cookie_penalty, score,
    )

    findings.sort(key=lambda f: -f.severity.rank)
    return ScanResult(
        target=target,
        status_code=status_code,
        headers=normalized,
        findings=tuple(findings),
        score=score,
        grade=calculate_grade(score, config.grade_thresholds),
        breakdown=breakdown,
    )
