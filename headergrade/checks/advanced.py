"""Newer, defence-in-depth headers (isolation, reporting, transparency)."""

import json

from ..models import Category, ConfigIssue, HeaderRule, Severity


ONE_DAY = 86400


def check_expect_ct(value: str, headers=None) -> ConfigIssue | None:
    lowered = value.lower()
    if "max-age=" not in lowered.replace(" ", ""):
        return ConfigIssue(
            issue="Expect-CT header missing max-age directive",
            recommendation="Add max-age directive with an appropriate value",
            severity=Severity.MEDIUM,
        )
    if "enforce" not in lowered:
        return ConfigIssue(
            issue="Expect-CT header missing enforce directive",
            recommendation="Add enforce directive to require Certificate Transparency compliance",
            severity=Severity.LOW,
        )
    return None


def _invalid_json(header: str) -> ConfigIssue:
    return ConfigIssue(
        issue=f"{header} header contains invalid JSON",
        recommendation=f"Ensure the {header} header contains valid JSON",
        severity=Severity.LOW,
    )


def _short_max_age(config: dict) -> bool:
    max_age = config.get("max_age")
    return not isinstance(max_age, (int, float)) or isinstance(max_age, bool) or max_age < ONE_DAY


def check_report_to(value: str, headers=None) -> ConfigIssue | None:
    """Report-To carries one JSON object per reporting group, comma separated."""
    try:
        groups = json.loads(f"[{value}]")
    except ValueError:
        return _invalid_json("Report-To")
    if not groups or not all(isinstance(g, dict) for g in groups):
        return _invalid_json("Report-To")

    for group in groups:
        endpoints = group.get("endpoints")
        if not isinstance(endpoints, list) or not endpoints:
            return ConfigIssue(
                issue="Report-To header has invalid or missing endpoints",
                recommendation="Include at least one valid endpoint in the Report-To configuration",
                severity=Severity.LOW,
            )
    for group in groups:
        if _short_max_age(group):
            return ConfigIssue(
                issue="Report-To header has short max_age or missing max_age",
                recommendation="Set max_age to at least 86400 (1 day)",
                severity=Severity.INFO,
            )
    return None


def check_nel(value: str, headers=None) -> ConfigIssue | None:
    try:
        config = json.loads(value)
    except ValueError:
        return _invalid_json("NEL")
    if not isinstance(config, dict):
        return _invalid_json("NEL")

    if not config.get("report_to"):
        return ConfigIssue(
            issue="NEL header missing report_to field",
            recommendation="Include report_to field to specify the reporting group",
            severity=Severity.LOW,
        )
    if _short_max_age(config):
        return ConfigIssue(
            issue="NEL header has short max_age or missing max_age",
            recommendation="Set max_age to at least 86400 (1 day)",
            severity=Severity.INFO,
        )
    return None


CLEAR_SITE_DATA_DIRECTIVES = frozenset({
    "cache", "cookies", "storage", "executioncontexts",
    "clienthints", "prefetchcache", "prerendercache", "*",
})


def check_clear_site_data(value: str, headers=None) -> ConfigIssue | None:
    """Clear-Site-Data is a list of quoted directives, e.g. "cache", "cookies"."""
    try:
        directives = json.loads(f"[{value}]")
    except ValueError:
        return _invalid_json("Clear-Site-Data")
    if not directives or not all(isinstance(d, str) for d in directives):
        return _invalid_json("Clear-Site-Data")

    unknown = [d for d in directives if d.lower() not in CLEAR_SITE_DATA_DIRECTIVES]
    if unknown:
        return ConfigIssue(
            issue=f"Clear-Site-Data contains unknown directives: {', '.join(unknown)}",
            recommendation='Use only "cache", "cookies", "storage" or "executionContexts"',
            severity=Severity.LOW,
        )
    return None


def _allow_list(header: str, allowed: tuple[str, ...]):
    quoted = ", ".join(f'"{v}"' for v in allowed)

    def check(value: str, headers=None) -> ConfigIssue | None:
        # report-to parameters such as ;report-to="coop" do not change the policy
        policy = value.split(";", 1)[0].strip().lower()
        if policy not in allowed:
            return ConfigIssue(
                issue=f"{header} has invalid value",
                recommendation=f"Use one of {quoted}",
                severity=Severity.LOW,
            )
        return None

    check.__name__ = "check_" + header.lower().replace("-", "_")
    return check


check_coep = _allow_list("Cross-Origin-Embedder-Policy", ("require-corp", "credentialless"))
check_coop = _allow_list(
    "Cross-Origin-Opener-Policy", ("same-origin", "same-origin-allow-popups", "unsafe-none")
)
check_corp = _allow_list("Cross-Origin-Resource-Policy", ("same-site", "same-origin", "cross-origin"))


ADVANCED_RULES = (
    HeaderRule(
        key="expect-ct",
        name="Expect-CT",
        description="Allows sites to opt-in to Certificate Transparency reporting",
        recommendation='Add "Expect-CT: max-age=86400, enforce" header',
        severity=Severity.MEDIUM,
        category=Category.ADVANCED,
        weight=5,
        validator=check_expect_ct,
        example="Expect-CT: max-age=86400, enforce",
    ),
    HeaderRule(
        key="cross-origin-embedder-policy",
        name="Cross-Origin-Embedder-Policy",
        description="Controls which cross-origin resources can be loaded",
        recommendation='Add "Cross-Origin-Embedder-Policy: require-corp" header for isolation',
        severity=Severity.LOW,
        category=Category.ADVANCED,
        weight=4,
        validator=check_coep,
        example="Cross-Origin-Embedder-Policy: require-corp",
    ),
    HeaderRule(
        key="cross-origin-opener-policy",
        name="Cross-Origin-Opener-Policy",
        description="Controls sharing browsing context with cross-origin documents",
        recommendation='Add "Cross-Origin-Opener-Policy: same-origin" header for isolation',
        severity=Severity.LOW,
        category=Category.ADVANCED,
        weight=4,
        validator=check_coop,
        example="Cross-Origin-Opener-Policy: same-origin",
    ),
    HeaderRule(
        key="cross-origin-resource-policy",
        name="Cross-Origin-Resource-Policy",
        description="Controls which origins can load the resource",
        recommendation='Add "Cross-Origin-Resource-Policy: same-origin" header',
        severity=Severity.LOW,
        category=Category.ADVANCED,
        weight=4,
        validator=check_corp,
        example="Cross-Origin-Resource-Policy: same-origin",
    ),
    HeaderRule(
        key="report-to",
        name="Report-To",
        description="Specifies a server for browsers to send security reports to",
        recommendation="Implement a Report-To header with valid JSON configuration",
        severity=Severity.LOW,
        category=Category.ADVANCED,
        weight=2,
        validator=check_report_to,
        example='Report-To: {"group": "default", "max_age": 31536000, '
                '"endpoints": [{"url": "https://example.com/reports"}]}',
    ),
    HeaderRule(
        key="nel",
        name="NEL (Network Error Logging)",
        description="Enables reporting of network errors to help identify connectivity issues",
        recommendation="Configure NEL header with appropriate report-to group",
        severity=Severity.LOW,
        category=Category.ADVANCED,
        weight=2,
        validator=check_nel,
        example='NEL: {"report_to": "default", "max_age": 31536000, "include_subdomains": true}',
    ),
    HeaderRule(
        key="clear-site-data",
        name="Clear-Site-Data",
        description="Clears browsing data (cookies, storage, cache) associated with the site",
        recommendation="Consider using this header for logout pages",
        severity=Severity.INFO,
        category=Category.ADVANCED,
        weight=2,
        validator=check_clear_site_data,
        example='Clear-Site-Data: "cache", "cookies", "storage"',
    ),
    HeaderRule(
        key="server-timing",
        name="Server-Timing",
        description="Provides performance metrics to help diagnose site performance",
        recommendation="Use Server-Timing to expose appropriate performance metrics",
        severity=Severity.INFO,
        category=Category.ADVANCED,
        weight=2,
        example="Server-Timing: total;dur=123",
    ),
)
