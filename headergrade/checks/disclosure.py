"""Headers and cookie names that leak implementation details."""

import logging
import re
from typing import Any, Mapping

from ..models import AnalyzerResult, Category, Finding, HeaderRule, Severity, Status
from .cookies import cookie_names


logger = logging.getLogger(__name__)

DEFAULT_DISCLOSURE_PENALTIES = {
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}
DEFAULT_MAX_DISCLOSURE_PENALTY = 10

VERSION_PATTERN = re.compile(r"[0-9]+\.[0-9]+(\.[0-9]+)?")
VERSIONED_HEADERS = ("server", "x-powered-by")


def _rule(key, name, description, recommendation, severity):
    return HeaderRule(
        key=key,
        name=name,
        description=description,
        recommendation=recommendation,
        severity=severity,
        category=Category.DISCLOSURE,
    )


DISCLOSURE_RULES = (
    _rule("server", "Server", "Reveals server software version",
          "Remove or sanitize the Server header to hide implementation details", Severity.LOW),
    _rule("x-powered-by", "X-Powered-By", "Reveals technology stack information",
          "Remove the X-Powered-By header to hide implementation details", Severity.LOW),
    _rule("x-aspnet-version", "X-AspNet-Version", "Reveals ASP.NET version",
          "Remove the X-AspNet-Version header", Severity.MEDIUM),
    _rule("x-aspnetmvc-version", "X-AspNetMvc-Version", "Reveals ASP.NET MVC version",
          "Remove the X-AspNetMvc-Version header", Severity.MEDIUM),
    _rule("x-generator", "X-Generator", "Reveals the platform or CMS used",
          "Remove the X-Generator header", Severity.LOW),
    _rule("x-drupal-cache", "X-Drupal-Cache", "Reveals Drupal as the CMS",
          "Remove the X-Drupal-Cache header", Severity.LOW),
    _rule("x-drupal-dynamic-cache", "X-Drupal-Dynamic-Cache", "Reveals Drupal as the CMS",
          "Remove the X-Drupal-Dynamic-Cache header", Severity.LOW),
    _rule("x-wordpress-cache", "X-WordPress-Cache", "Reveals WordPress as the CMS",
          "Remove the X-WordPress-Cache header", Severity.LOW),
    _rule("x-wp-nonce", "X-WP-Nonce", "Reveals WordPress as the CMS",
          "Consider whether this header should be exposed", Severity.LOW),
    _rule("x-pingback", "X-Pingback", "Often indicates WordPress and provides an XML-RPC endpoint",
          "Remove the X-Pingback header if not needed", Severity.LOW),
    _rule("laravel_session", "laravel_session", "Reveals Laravel as the framework",
          "Rename the session cookie to hide framework information", Severity.LOW),
    _rule("phpbb-data", "phpbb-data", "Reveals phpBB as the forum software",
          "Rename the cookie to hide implementation details", Severity.LOW),
    _rule("joomla_user_state", "joomla_user_state", "Reveals Joomla as the CMS",
          "Rename the cookie to hide implementation details", Severity.LOW),
    _rule("x-varnish", "X-Varnish", "Reveals Varnish Cache is in use",
          "Consider removing the X-Varnish header", Severity.INFO),
    _rule("via", "Via", "May reveal proxy information",
          "Consider customizing or removing the Via header", Severity.INFO),
    _rule("x-cache", "X-Cache", "Reveals caching infrastructure details",
          "Consider removing the X-Cache header", Severity.INFO),
    _rule("x-runtime", "X-Runtime", "Reveals application runtime information",
          "Remove the X-Runtime header to hide implementation details", Severity.LOW),
    _rule("x-debug-token", "X-Debug-Token", "Debug information from Symfony framework",
          "Remove debug headers in production", Severity.MEDIUM),
    _rule("x-debug-token-link", "X-Debug-Token-Link", "Debug information from Symfony framework",
          "Remove debug headers in production", Severity.MEDIUM),
)


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def analyze_disclosure(
    headers: Mapping[str, Any],
    penalties: Mapping[Severity, float] | None = None,
    max_penalty: float = DEFAULT_MAX_DISCLOSURE_PENALTY,
    rules=DISCLOSURE_RULES,
) -> AnalyzerResult:
    """Flag leaking headers and cookie names, plus version numbers in banners.

    ``headers`` must already be normalized to lowercase keys.
    """
    penalties = penalties or DEFAULT_DISCLOSURE_PENALTIES
    set_cookie = headers.get("set-cookie", ())
    if isinstance(set_cookie, str):
        set_cookie = (set_cookie,)
    cookies = {}
    for name, raw in zip(cookie_names(set_cookie), set_cookie):
        cookies.setdefault(name.lower(), raw)

    findings = []
    for rule in rules:
        value = headers.get(rule.key)
        if value is None:
            value = cookies.get(rule.key)
        if value is None:
            continue
        findings.append(Finding(
            header=rule.name,
            status=Status.DANGEROUS,
            severity=rule.severity,
            category=Category.DISCLOSURE,
            value=_as_text(value),
            description=rule.description,
            recommendation=rule.recommendation,
        ))

    for key in VERSIONED_HEADERS:
        value = headers.get(key)
        if value is None or not VERSION_PATTERN.search(_as_text(value)):
            continue
        name = "Server" if key == "server" else "X-Powered-By"
        findings.append(Finding(
            header=name,
            status=Status.DANGEROUS,
            severity=Severity.MEDIUM,
            category=Category.DISCLOSURE,
            value=_as_text(value),
            description=f"{name} header contains version information",
            recommendation=f"Remove version information from {name} header",
        ))

    penalty = sum(penalties.get(f.severity, 0) for f in findings)
    capped = min(penalty, max_penalty)
    if findings:
        logger.debug("Disclosure headers found: %d, penalty %.1f (uncapped %.1f)", len(findings), capped, penalty)
    return AnalyzerResult(findings=tuple(findings), penalty=capped)
