"""Configuration validator tests, one header at a time."""

import pytest

from headergrade.checks.advanced import (
    check_clear_site_data,
    check_coep,
    check_coop,
    check_corp,
    check_expect_ct,
    check_nel,
    check_report_to,
)
from headergrade.checks.cors import (
    check_allow_credentials,
    check_allow_headers,
    check_allow_methods,
    check_allow_origin,
    check_expose_headers,
    check_max_age,
)
from headergrade.checks.essential import (
    check_content_type_options,
    check_csp,
    check_frame_options,
    check_hsts,
    check_permissions_policy,
    check_referrer_policy,
    check_xss_protection,
)
from headergrade.models import Severity


def test_hsts_fully_configured():
    assert check_hsts("max-age=31536000; includeSubDomains; preload") is None


@pytest.mark.parametrize("value, severity, text", [
    ("includeSubDomains; preload", Severity.HIGH, "max-age"),
    ("max-age=1000", Severity.MEDIUM, "less than 1 year"),
    ("max-age=31536000", Severity.LOW, "includeSubDomains"),
    ("max-age=63072000; includeSubDomains", Severity.INFO, "preload"),
])
def test_hsts_reports_first_problem_only(value, severity, text):
    issue = check_hsts(value)
    assert issue.severity == severity
    assert text in issue.issue


def test_csp_unsafe_sources_are_high():
    issue = check_csp("default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self'")
    assert issue.severity == Severity.HIGH


def test_csp_wildcard_without_scoping():
    issue = check_csp("default-src *")
    assert issue.severity == Severity.MEDIUM
    assert "wildcard" in issue.issue


def test_csp_wildcard_scoped_to_images_reports_missing_directives():
    issue = check_csp("default-src 'self'; img-src *")
    assert issue.severity == Severity.MEDIUM
    assert issue.issue.endswith("script-src, style-src")


def test_csp_complete_policy():
    assert check_csp("default-src 'self'; script-src 'self'; style-src 'self'") is None


@pytest.mark.parametrize("value", ["DENY", "sameorigin", " SAMEORIGIN "])
def test_frame_options_valid(value):
    assert check_frame_options(value) is None


def test_frame_options_allow_from_is_invalid():
    assert check_frame_options("ALLOW-FROM https://example.com").severity == Severity.MEDIUM


def test_content_type_options():
    assert check_content_type_options("nosniff") is None
    assert check_content_type_options("sniff").severity == Severity.MEDIUM


def test_xss_protection():
    assert check_xss_protection("1; mode=block") is None
    assert check_xss_protection("0").severity == Severity.MEDIUM
    assert check_xss_protection("1").severity == Severity.LOW


@pytest.mark.parametrize("value", ["unsafe-url", "no-referrer-when-downgrade"])
def test_referrer_policy_weak(value):
    issue = check_referrer_policy(value)
    assert issue.severity == Severity.LOW
    assert value in issue.issue


def test_referrer_policy_strict():
    assert check_referrer_policy("strict-origin-when-cross-origin") is None


def test_permissions_policy():
    assert check_permissions_policy("camera=(), microphone=(), geolocation=(), payment=()") is None
    assert "wildcards" in check_permissions_policy("camera=*").issue
    assert check_permissions_policy("camera=()").issue.endswith("microphone, geolocation, payment")


def test_allow_origin_wildcard():
    assert check_allow_origin("*").severity == Severity.MEDIUM
    assert check_allow_origin("https://example.com") is None


def test_allow_credentials_needs_origin_context():
    assert check_allow_credentials("TRUE", {"access-control-allow-origin": "*"}).severity == Severity.HIGH
    assert check_allow_credentials("true", {"access-control-allow-origin": "https://a.example"}) is None
    assert check_allow_credentials("true", {}) is None
    assert check_allow_credentials("false", {"access-control-allow-origin": "*"}) is None


def test_allow_methods():
    issue = check_allow_methods("GET, put, DELETE")
    assert issue.severity == Severity.LOW
    assert "PUT, DELETE" in issue.issue
    assert check_allow_methods("GET, POST, OPTIONS") is None


def test_allow_headers_wildcard():
    assert check_allow_headers("*").severity == Severity.LOW
    assert check_allow_headers("Content-Type") is None


def test_expose_headers_sensitive_case_insensitive():
    issue = check_expose_headers("content-length, authorization, x-api-key")
    assert issue.severity == Severity.MEDIUM
    assert "Authorization, X-API-Key" in issue.issue
    assert check_expose_headers("Content-Length, ETag") is None


def test_max_age():
    assert check_max_age("86400") is None
    assert check_max_age("86401").severity == Severity.INFO
    assert check_max_age("forever").severity == Severity.LOW


def test_expect_ct():
    assert check_expect_ct("max-age=86400, enforce") is None
    assert check_expect_ct("enforce").severity == Severity.MEDIUM
    assert check_expect_ct("max-age=86400").severity == Severity.LOW


def test_report_to():
    good = '{"group": "g", "max_age": 86400, "endpoints": [{"url": "https://r.example"}]}'
    assert check_report_to(good) is None
    assert check_report_to(good + ", " + good) is None
    assert check_report_to("{not json").issue == "Report-To header contains invalid JSON"
    assert check_report_to('{"max_age": 86400, "endpoints": []}').severity == Severity.LOW
    assert check_report_to('{"max_age": 60, "endpoints": [{"url": "x"}]}').severity == Severity.INFO


def test_nel():
    assert check_nel('{"report_to": "default", "max_age": 86400}') is None
    assert check_nel("report_to=default").issue == "NEL header contains invalid JSON"
    assert check_nel('["a"]').severity == Severity.LOW
    assert "report_to" in check_nel('{"max_age": 86400}').issue
    assert check_nel('{"report_to": "default"}').severity == Severity.INFO


def test_clear_site_data():
    assert check_clear_site_data('"cache", "cookies", "storage"') is None
    assert check_clear_site_data("cache, cookies").severity == Severity.LOW
    issue = check_clear_site_data('"cache", "history"')
    assert "history" in issue.issue


def test_cross_origin_policies_allow_lists():
    assert check_coep("require-corp") is None
    assert check_coep("credentialless") is None
    assert check_coep("unsafe-none").severity == Severity.LOW
    assert check_coop("same-origin-allow-popups") is None
    assert check_coop('same-origin; report-to="coop"') is None
    assert check_coop("allow-all").severity == Severity.LOW
    assert check_corp("cross-origin") is None
    assert check_corp("anyone") is not None
