"""Outbound HTTP: fetch a target's response headers."""

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

import requests


logger = logging.getLogger(__name__)


class InvalidURLError(ValueError):
    pass


class FetchError(Exception):
    """The target could not be reached or did not answer."""


@dataclass
class FetchedResponse:
    url: str
    status_code: int
    headers: list[tuple[str, str]] = field(default_factory=list)


def validate_url(url: str) -> str:
    """Normalize a URL, defaulting to https:// when no scheme is given."""
    if not url or not isinstance(url, str):
        raise InvalidURLError("URL is required and must be a string")
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    parsed = urlparse(url)
    if not parsed.netloc or " " in parsed.netloc:
        raise InvalidURLError(f"Invalid URL: {url}")
    return url


def _header_items(response: requests.Response) -> list[tuple[str, str]]:
    """All response headers as pairs, keeping repeated Set-Cookie lines apart."""
    raw_headers: Any = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        items = []
        for name in raw_headers.keys():
            for value in raw_headers.getlist(name):
                items.append((name, value))
        return items
    return list(response.headers.items())


def fetch_headers(
    url: str,
    *,
    session: requests.Session | None = None,
    timeout: float = 10,
    user_agent: str = "HeaderGrade/1.0",
    max_redirects: int = 5,
    method: str = "GET",
    verify: bool = True,
) -> FetchedResponse:
    """Request the URL and return the final response's status and headers.

    Every status code is accepted; only transport failures raise FetchError.
    A session passed in is used as is and left open; otherwise a private one
    is created with ``max_redirects`` applied and closed afterwards.
    """
    url = validate_url(url)
    if session is None:
        with requests.Session() as own:
            own.max_redirects = max_redirects
            return _request(own, url, method, timeout, user_agent, max_redirects, verify)
    return _request(session, url, method, timeout, user_agent, max_redirects, verify)


def _request(session, url, method, timeout, user_agent, max_redirects, verify) -> FetchedResponse:
    try:
        resp = session.request(
            method.upper(),
            url,
            headers={"User-Agent": user_agent},
            timeout=timeout,
            allow_redirects=True,
            verify=verify,
        )
    except requests.exceptions.Timeout as e:
        raise FetchError(f"Connection timed out for: {url} (after {timeout}s)") from e
    except requests.exceptions.TooManyRedirects as e:
        raise FetchError(f"Too many redirects for: {url} (limit {max_redirects})") from e
    except requests.exceptions.ConnectionError as e:
        raise FetchError(f"Could not connect to {url}: {e}") from e
    except requests.RequestException as e:
        raise FetchError(f"Network error accessing {url}: {e}") from e

    logger.debug("%s %s -> %s", method.upper(), url, resp.status_code)
    return FetchedResponse(url=url, status_code=resp.status_code, headers=_header_items(resp))
