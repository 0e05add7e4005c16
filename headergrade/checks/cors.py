"""CORS response headers."""

from ..models import Category, ConfigIssue, HeaderRule, Severity


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def check_allow_origin(value: str, headers=None) -> ConfigIssue | None:
    if value.strip() == "*":
        return ConfigIssue(
            issue="Access-Control-Allow-Origin uses wildcard (*)",
            recommendation="Restrict CORS to specific origins instead of using a wildcard",
            severity=Severity.MEDIUM,
        )
    return None


def check_allow_credentials(value: str, headers=None) -> ConfigIssue | None:
    """Credentials with a wildcard origin; needs the sibling Allow-Origin header."""
    if value.strip().lower() != "true":
        return None
    allow_origin = (headers or {}).get("access-control-allow-origin")
    if isinstance(allow_origin, str) and allow_origin.strip() == "*":
        return ConfigIssue(
            issue="Access-Control-Allow-Credentials is true while Allow-Origin is wildcard",
            recommendation="When allowing credentials, specify explicit origins instead of using a wildcard",
            severity=Severity.HIGH,
        )
    return None


SENSITIVE_METHODS = ("PUT", "DELETE", "PATCH")


def check_allow_methods(value: str, headers=None) -> ConfigIssue | None:
    allowed = {m.upper() for m in _split_list(value)}
    risky = [m for m in SENSITIVE_METHODS if m in allowed]
    if risky:
        return ConfigIssue(
            issue=f"CORS allows potentially dangerous methods: {', '.join(risky)}",
            recommendation="Only allow necessary HTTP methods in Access-Control-Allow-Methods",
            severity=Severity.LOW,
        )
    return None


def check_allow_headers(value: str, headers=None) -> ConfigIssue | None:
    if value.strip() == "*":
        return ConfigIssue(
            issue="Access-Control-Allow-Headers uses wildcard (*)",
            recommendation="Explicitly list allowed headers instead of using a wildcard",
            severity=Severity.LOW,
        )
    return None


SENSITIVE_EXPOSED_HEADERS = ("Authorization", "X-API-Key", "X-Auth-Token", "Set-Cookie")


def check_expose_headers(value: str, headers=None) -> ConfigIssue | None:
    exposed = {h.lower() for h in _split_list(value)}
    sensitive = [h for h in SENSITIVE_EXPOSED_HEADERS if h.lower() in exposed]
    if sensitive:
        return ConfigIssue(
            issue=f"Exposing potentially sensitive headers: {', '.join(sensitive)}",
            recommendation="Avoid exposing sensitive headers to cross-origin requests",
            severity=Severity.MEDIUM,
        )
    return None


MAX_PREFLIGHT_AGE = 86400


def check_max_age(value: str, headers=None) -> ConfigIssue | None:
    try:
        max_age = int(value.strip())
    except ValueError:
        return ConfigIssue(
            issue="Access-Control-Max-Age is not a number",
            recommendation="Use a whole number of seconds (e.g., 7200)",
            severity=Severity.LOW,
        )
    if max_age > MAX_PREFLIGHT_AGE:
        return ConfigIssue(
            issue="Access-Control-Max-Age is excessively long",
            recommendation="Consider using a shorter max-age value (e.g., 7200 seconds / 2 hours)",
            severity=Severity.INFO,
        )
    return None


CORS_RULES = (
    HeaderRule(
        key="access-control-allow-origin",
        name="Access-Control-Allow-Origin",
        description="Specifies which origins can access the resource",
        recommendation="Restrict to specific trusted origins instead of using a wildcard (*)",
        severity=Severity.MEDIUM,
        category=Category.CORS,
        weight=5,
        validator=check_allow_origin,
        example="Access-Control-Allow-Origin: https://app.example.com",
    ),
    HeaderRule(
        key="access-control-allow-credentials",
        name="Access-Control-Allow-Credentials",
        description="Indicates whether the response can be shared with requesting code "
                    "from the given origin when credentials are provided",
        recommendation="Only set to true if necessary, and ensure origins are restricted",
        severity=Severity.MEDIUM,
        category=Category.CORS,
        weight=4,
        validator=check_allow_credentials,
        example="Access-Control-Allow-Credentials: true",
    ),
    HeaderRule(
        key="access-control-allow-methods",
        name="Access-Control-Allow-Methods",
        description="Specifies which HTTP methods are allowed when accessing the resource",
        recommendation="Only allow necessary HTTP methods",
        severity=Severity.LOW,
        category=Category.CORS,
        weight=2,
        validator=check_allow_methods,
        example="Access-Control-Allow-Methods: GET, POST",
    ),
    HeaderRule(
        key="access-control-allow-headers",
        name="Access-Control-Allow-Headers",
        description="Specifies which HTTP headers can be used when making the actual request",
        recommendation="Explicitly list allowed headers instead of using a wildcard",
        severity=Severity.LOW,
        category=Category.CORS,
        weight=2,
        validator=check_allow_headers,
        example="Access-Control-Allow-Headers: Content-Type",
    ),
    HeaderRule(
        key="access-control-expose-headers",
        name="Access-Control-Expose-Headers",
        description="Indicates which headers can be exposed as part of the response",
        recommendation="Only expose necessary non-sensitive headers",
        severity=Severity.LOW,
        category=Category.CORS,
        weight=1,
        validator=check_expose_headers,
        example="Access-Control-Expose-Headers: Content-Length",
    ),
    HeaderRule(
        key="access-control-max-age",
        name="Access-Control-Max-Age",
        description="Indicates how long the results of a preflight request can be cached",
        recommendation="Set a reasonable max age (e.g., 7200 seconds / 2 hours)",
        severity=Severity.INFO,
        category=Category.CORS,
        weight=1,
        validator=check_max_age,
        example="Access-Control-Max-Age: 7200",
    ),
)
