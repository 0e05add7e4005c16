"""Essential security headers every site should send."""

import re

from ..models import Category, ConfigIssue, HeaderRule, Severity


ONE_YEAR = 31536000

_MAX_AGE = re.compile(r"max-age\s*=\s*\"?(\d+)", re.I)


def check_hsts(value: str, headers=None) -> ConfigIssue | None:
    """Check Strict-Transport-Security directives, most serious problem first."""
    match = _MAX_AGE.search(value)
    if not match:
        return ConfigIssue(
            issue="HSTS header missing max-age directive",
            recommendation="Add max-age directive with a value of at least 31536000 (1 year)",
            severity=Severity.HIGH,
        )
    if int(match.group(1)) < ONE_YEAR:
        return ConfigIssue(
            issue="HSTS max-age is less than 1 year",
            recommendation="Increase max-age to at least 31536000 (1 year)",
            severity=Severity.MEDIUM,
        )
    directives = {d.strip().lower() for d in value.split(";")}
    if "includesubdomains" not in directives:
        return ConfigIssue(
            issue="HSTS missing includeSubDomains directive",
            recommendation="Add includeSubDomains directive to protect all subdomains",
            severity=Severity.LOW,
        )
    if "preload" not in directives:
        return ConfigIssue(
            issue="HSTS missing preload directive",
            recommendation="Consider adding preload directive to be eligible for browser preload lists",
            severity=Severity.INFO,
        )
    return None


CSP_UNSAFE_SOURCES = ("'unsafe-inline'", "'unsafe-eval'")
CSP_RECOMMENDED_DIRECTIVES = ("default-src", "script-src", "style-src")


def check_csp(value: str, headers=None) -> ConfigIssue | None:
    lowered = value.lower()
    if any(source in lowered for source in CSP_UNSAFE_SOURCES):
        return ConfigIssue(
            issue="CSP contains unsafe directives",
            recommendation="Remove unsafe-inline and unsafe-eval directives, use nonces or hashes instead",
            severity=Severity.HIGH,
        )
    # a wildcard is tolerated when the policy scopes it to fonts or images
    if "*" in value and "font-src" not in lowered and "img-src" not in lowered:
        return ConfigIssue(
            issue="CSP contains wildcards",
            recommendation="Avoid using wildcards in CSP directives",
            severity=Severity.MEDIUM,
        )
    missing = [d for d in CSP_RECOMMENDED_DIRECTIVES if d not in lowered]
    if missing:
        return ConfigIssue(
            issue=f"CSP missing recommended directives: {', '.join(missing)}",
            recommendation="Include all recommended directives in your CSP",
            severity=Severity.MEDIUM,
        )
    return None


def check_content_type_options(value: str, headers=None) -> ConfigIssue | None:
    if value.strip().lower() != "nosniff":
        return ConfigIssue(
            issue="X-Content-Type-Options has invalid value",
            recommendation='Use the value "nosniff"',
            severity=Severity.MEDIUM,
        )
    return None


def check_frame_options(value: str, headers=None) -> ConfigIssue | None:
    if value.strip().upper() not in ("DENY", "SAMEORIGIN"):
        return ConfigIssue(
            issue="X-Frame-Options has invalid value",
            recommendation="Use either DENY or SAMEORIGIN values",
            severity=Severity.MEDIUM,
        )
    return None


def check_xss_protection(value: str, headers=None) -> ConfigIssue | None:
    if "1" not in value:
        return ConfigIssue(
            issue="XSS Protection is disabled",
            recommendation='Set value to "1; mode=block"',
            severity=Severity.MEDIUM,
        )
    if "mode=block" not in value.replace(" ", "").lower():
        return ConfigIssue(
            issue="XSS Protection is enabled but not in blocking mode",
            recommendation="Add mode=block directive",
            severity=Severity.LOW,
        )
    return None


WEAK_REFERRER_POLICIES = ("unsafe-url", "no-referrer-when-downgrade")


def check_referrer_policy(value: str, headers=None) -> ConfigIssue | None:
    lowered = value.lower()
    for policy in WEAK_REFERRER_POLICIES:
        if policy in lowered:
            return ConfigIssue(
                issue=f"Referrer-Policy contains weak policy: {policy}",
                recommendation="Use stricter policies like strict-origin-when-cross-origin",
                severity=Severity.LOW,
            )
    return None


RESTRICTED_FEATURES = ("camera", "microphone", "geolocation", "payment")


def check_permissions_policy(value: str, headers=None) -> ConfigIssue | None:
    if "*" in value:
        return ConfigIssue(
            issue="Permissions-Policy contains wildcards for feature policies",
            recommendation="Be explicit about allowed origins for each feature",
            severity=Severity.LOW,
        )
    lowered = value.lower()
    missing = [f for f in RESTRICTED_FEATURES if f not in lowered]
    if missing:
        return ConfigIssue(
            issue=f"Permissions-Policy missing restrictions for: {', '.join(missing)}",
            recommendation="Consider restricting these features if not needed by your application",
            severity=Severity.LOW,
        )
    return None


ESSENTIAL_RULES = (
    HeaderRule(
        key="strict-transport-security",
        name="Strict-Transport-Security (HSTS)",
        description="Forces browsers to use HTTPS for the domain",
        recommendation='Add "Strict-Transport-Security: max-age=31536000; includeSubDomains; preload" header',
        severity=Severity.HIGH,
        category=Category.ESSENTIAL,
        weight=15,
        validator=check_hsts,
        example="Strict-Transport-Security: max-age=31536000; includeSubDomains; preload",
    ),
    HeaderRule(
        key="content-security-policy",
        name="Content-Security-Policy (CSP)",
        description="Controls resources the browser is allowed to load",
        recommendation="Implement a strict CSP policy to prevent XSS attacks",
        severity=Severity.HIGH,
        category=Category.ESSENTIAL,
        weight=15,
        validator=check_csp,
        example="Content-Security-Policy: default-src 'self'; script-src 'self'; style-src 'self'; object-src 'none'",
    ),
    HeaderRule(
        key="x-content-type-options",
        name="X-Content-Type-Options",
        description="Prevents MIME-sniffing attacks",
        recommendation='Add "X-Content-Type-Options: nosniff" header',
        severity=Severity.MEDIUM,
        category=Category.ESSENTIAL,
        weight=10,
        validator=check_content_type_options,
        example="X-Content-Type-Options: nosniff",
    ),
    HeaderRule(
        key="x-frame-options",
        name="X-Frame-Options",
        description="Prevents clickjacking attacks",
        recommendation='Add "X-Frame-Options: DENY" or "X-Frame-Options: SAMEORIGIN" header',
        severity=Severity.MEDIUM,
        category=Category.ESSENTIAL,
        weight=10,
        validator=check_frame_options,
        example="X-Frame-Options: DENY",
    ),
    HeaderRule(
        key="referrer-policy",
        name="Referrer-Policy",
        description="Controls how much referrer information should be included with requests",
        recommendation='Add "Referrer-Policy: strict-origin-when-cross-origin" header',
        severity=Severity.LOW,
        category=Category.ESSENTIAL,
        weight=8,
        validator=check_referrer_policy,
        example="Referrer-Policy: strict-origin-when-cross-origin",
    ),
    HeaderRule(
        key="permissions-policy",
        name="Permissions-Policy",
        description="Controls which browser features can be used on the page",
        recommendation="Implement a Permissions-Policy to restrict unnecessary browser features",
        severity=Severity.LOW,
        category=Category.ESSENTIAL,
        weight=7,
        validator=check_permissions_policy,
        example="Permissions-Policy: camera=(), microphone=(), geolocation=(), payment=()",
    ),
    HeaderRule(
        key="x-xss-protection",
        name="X-XSS-Protection",
        description="Enables XSS filtering in browsers",
        recommendation='Add "X-XSS-Protection: 1; mode=block" header',
        severity=Severity.LOW,
        category=Category.ESSENTIAL,
        weight=5,
        validator=check_xss_protection,
        example="X-XSS-Protection: 1; mode=block",
    ),
    HeaderRule(
        key="cache-control",
        name="Cache-Control",
        description="Controls how pages are cached by browsers and proxies",
        recommendation='For sensitive pages, add "Cache-Control: no-store, max-age=0" header',
        severity=Severity.LOW,
        category=Category.ESSENTIAL,
        weight=5,
        example="Cache-Control: no-store, max-age=0, must-revalidate",
    ),
)
