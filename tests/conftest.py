import pytest


SECURE_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Content-Security-Policy": "default-src 'self'; script-src 'self'; style-src 'self'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), payment=()",
    "X-XSS-Protection": "1; mode=block",
    "Cache-Control": "no-store, max-age=0",
    "Expect-CT": "max-age=86400, enforce",
    "Cross-Origin-Embedder-Policy": "require-corp",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Report-To": '{"group": "default", "max_age": 31536000, '
                 '"endpoints": [{"url": "https://example.com/reports"}]}',
    "NEL": '{"report_to": "default", "max_age": 31536000}',
    "Clear-Site-Data": '"cache", "cookies"',
    "Server-Timing": "total;dur=12",
    "Access-Control-Allow-Origin": "https://app.example.com",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Methods": "GET, POST",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Expose-Headers": "Content-Length",
    "Access-Control-Max-Age": "7200",
}


@pytest.fixture
def secure_headers():
    return dict(SECURE_HEADERS)


class FakeRawHeaders:
    """Mimics urllib3's HTTPHeaderDict: repeated headers via getlist()."""

    def __init__(self, pairs):
        self.pairs = list(pairs)

    def keys(self):
        seen = []
        for name, _ in self.pairs:
            if name.lower() not in [s.lower() for s in seen]:
                seen.append(name)
        return seen

    def getlist(self, name):
        return [v for k, v in self.pairs if k.lower() == name.lower()]


class FakeResponse:
    def __init__(self, status_code=200, pairs=()):
        self.status_code = status_code
        self.raw = type("Raw", (), {"headers": FakeRawHeaders(pairs)})()
        self.headers = {k: v for k, v in pairs}


class FakeSession:
    """Stands in for requests.Session; records calls, returns or raises."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.headers = {}
        self.max_redirects = 30
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response
