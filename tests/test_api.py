import pytest

from headergrade import api
from headergrade.models import ScanResult
from headergrade.scoring import evaluate


@pytest.fixture
def client(monkeypatch):
    calls = []

    def fake_run_scan(url, *, config, registry, scoring):
        calls.append((url, config))
        if "down" in url:
            return ScanResult.from_error(url, "Could not connect")
        return evaluate({"X-Frame-Options": "DENY"}, target=url, status_code=200, registry=registry, config=scoring)

    monkeypatch.setattr(api, "run_scan", fake_run_scan)
    app = api.create_app()
    app.config["TESTING"] = True
    with app.test_client() as c:
        c.calls = calls
        yield c


def test_info(client):
    data = client.get("/api").get_json()
    assert data["name"] == "headergrade"
    assert data["version"] == "1.0.0"


@pytest.mark.parametrize("path", ["/scan", "/api/scan"])
def test_scan(client, path):
    resp = client.post(path, json={"url": "https://example.com", "options": {"timeout": 3, "verify_tls": False}})
    data = resp.get_json()

    assert resp.status_code == 200
    assert data["url"] == "https://example.com"
    assert data["grade"] == "F"
    assert any(f["header"] == "X-Frame-Options" and f["status"] == "present" for f in data["findings"])
    _, config = client.calls[0]
    assert config["http"]["timeout"] == 3
    # only whitelisted options pass through
    assert config["http"]["verify_tls"] is True


def test_scan_requires_url(client):
    resp = client.post("/scan", json={"options": {}})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "URL is required"}


def test_scan_rejects_bad_options(client):
    resp = client.post("/scan", json={"url": "https://example.com", "options": ["x"]})
    assert resp.status_code == 400


@pytest.mark.parametrize("options, message", [
    ({"timeout": "abc"}, "timeout"),
    ({"timeout": 0}, "timeout"),
    ({"timeout": True}, "timeout"),
    ({"method": 5}, "method"),
    ({"method": "DELETE"}, "method"),
    ({"user_agent": ["x"]}, "user_agent"),
])
def test_scan_rejects_unusable_option_values(client, options, message):
    resp = client.post("/scan", json={"url": "https://127.0.0.1:9", "options": options})

    assert resp.status_code == 400
    assert resp.is_json
    assert message in resp.get_json()["error"]
    assert client.calls == []


def test_scan_accepts_head_method(client):
    resp = client.post("/scan", json={"url": "https://example.com", "options": {"method": "head", "timeout": 2.5}})
    assert resp.status_code == 200
    _, config = client.calls[0]
    assert config["http"]["method"] == "head"
    assert config["http"]["timeout"] == 2.5


def test_scan_error_is_reported_in_body(client):
    data = client.post("/scan", json={"url": "https://down.example"}).get_json()
    assert data["status"] == "error"
    assert data["score"] == 0
    assert data["grade"] == "F"
