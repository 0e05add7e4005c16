"""Cookie security attribute analysis."""

import logging
import re
from typing import Iterable, Mapping

from ..models import (
    AnalyzerResult,
    Category,
    CookieIssue,
    Finding,
    HeaderRule,
    Severity,
    Status,
)


logger = logging.getLogger(__name__)

DEFAULT_COOKIE_PENALTIES = {
    Severity.HIGH: 4,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0.5,
}
DEFAULT_MAX_COOKIE_PENALTY = 10

SENSITIVE_KEYWORDS = ("auth", "session", "token", "key", "secret", "password", "credential")

_SAMESITE = re.compile(r"^(strict|lax|none)$", re.I)

SET_COOKIE_RULE = HeaderRule(
    key="set-cookie",
    name="Set-Cookie",
    description="Sets a cookie with security attributes",
    recommendation="Ensure cookies use Secure, HttpOnly, and SameSite attributes",
    severity=Severity.HIGH,
    category=Category.COOKIE,
    example="Set-Cookie: id=a3fWa; Path=/; Secure; HttpOnly; SameSite=Strict",
)


def parse_cookie(raw: str) -> tuple[str, dict[str, str]]:
    """Split a Set-Cookie value into its name and lowercased attribute map."""
    parts = raw.split(";")
    name = parts[0].split("=", 1)[0].strip()
    attributes = {}
    for part in parts[1:]:
        key, _, value = part.partition("=")
        key = key.strip().lower()
        if key:
            attributes[key] = value.strip()
    return name, attributes


def cookie_names(values: Iterable[str]) -> list[str]:
    return [parse_cookie(v)[0] for v in values]


def _is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in SENSITIVE_KEYWORDS)


def check_cookie(raw: str) -> tuple[str, list[CookieIssue], list[str]]:
    """Return the cookie name, its issues and the core attributes it lacks."""
    name, attributes = parse_cookie(raw)
    secure = "secure" in attributes
    http_only = "httponly" in attributes
    same_site = attributes.get("samesite", "")
    has_same_site = bool(_SAMESITE.match(same_site))

    issues = []
    missing = []
    if not secure:
        missing.append("Secure")
        issues.append(CookieIssue(
            kind="missing_secure",
            description="Missing Secure attribute",
            recommendation="Add Secure attribute to ensure cookie is only sent over HTTPS",
            severity=Severity.HIGH,
        ))
    if not http_only:
        missing.append("HttpOnly")
        issues.append(CookieIssue(
            kind="missing_httponly",
            description="Missing HttpOnly attribute",
            recommendation="Add HttpOnly attribute to prevent JavaScript access to cookie",
            severity=Severity.HIGH,
        ))
    if not has_same_site:
        missing.append("SameSite")
        issues.append(CookieIssue(
            kind="missing_samesite",
            description="Missing SameSite attribute",
            recommendation="Add SameSite=Strict or SameSite=Lax attribute to prevent CSRF attacks",
            severity=Severity.MEDIUM,
        ))
    elif same_site.lower() == "none" and not secure:
        issues.append(CookieIssue(
            kind="samesite_none_without_secure",
            description="Using SameSite=None without Secure attribute",
            recommendation="When using SameSite=None, the Secure attribute is required",
            severity=Severity.HIGH,
        ))
    return name, issues, missing


def analyze_cookies(
    values: Iterable[str],
    penalties: Mapping[Severity, float] | None = None,
    max_penalty: float = DEFAULT_MAX_COOKIE_PENALTY,
) -> AnalyzerResult:
    """Build one finding per cookie with issues; penalty is per issue, capped."""
    penalties = penalties or DEFAULT_COOKIE_PENALTIES
    findings = []
    penalty = 0.0

    for raw in values:
        name, issues, missing = check_cookie(raw)
        if not issues:
            continue

        severity = max((i.severity for i in issues), key=lambda s: s.rank)
        if missing and _is_sensitive(name):
            severity = Severity.HIGH
            summary = (
                f'Potentially sensitive cookie "{name}" missing critical attributes: '
                f"{', '.join(missing)}"
            )
        else:
            summary = f'Cookie "{name}": ' + "; ".join(i.description for i in issues)

        findings.append(Finding(
            header="Cookie Security",
            status=Status.MISCONFIGURED,
            severity=severity,
            category=Category.COOKIE,
            value=raw,
            description=SET_COOKIE_RULE.description,
            issue=summary,
            recommendation="Set appropriate security attributes for cookies",
            cookie=name,
            issues=tuple(issues),
        ))
        penalty += sum(penalties.get(i.severity, 0) for i in issues)

    capped = min(penalty, max_penalty)
    if findings:
        logger.debug("Cookie issues found: %d, penalty %.1f (uncapped %.1f)", len(findings), capped, penalty)
    return AnalyzerResult(findings=tuple(findings), penalty=capped)
