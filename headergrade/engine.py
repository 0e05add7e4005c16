"""Scan orchestration: fetch each target and evaluate its headers."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

import requests

from .config import DEFAULTS, ScoringConfig, scoring_config
from .fetch import FetchError, InvalidURLError, fetch_headers
from .models import ScanResult
from .registry import HeaderRegistry, build_registry
from .scoring import evaluate


logger = logging.getLogger(__name__)


def run_scan(
    target_url: str,
    *,
    config: dict[str, Any] | None = None,
    session: requests.Session | None = None,
    registry: HeaderRegistry | None = None,
    scoring: ScoringConfig | None = None,
) -> ScanResult:
    """Fetch and grade one URL. Fetch failures come back as a degenerate result."""
    config = config or DEFAULTS
    http_cfg = {**DEFAULTS["http"], **(config.get("http") or {})}
    scoring = scoring or scoring_config(config)
    registry = registry or build_registry(scoring.weights)

    try:
        response = fetch_headers(
            target_url,
            session=session,
            timeout=http_cfg["timeout"],
            user_agent=http_cfg["user_agent"],
            max_redirects=http_cfg["max_redirects"],
            method=http_cfg["method"],
            verify=http_cfg["verify_tls"],
        )
    except (FetchError, InvalidURLError) as e:
        logger.warning("Error accessing %s: %s", target_url, e)
        return ScanResult.from_error(target_url, str(e))

    return evaluate(
        response.headers,
        target=response.url,
        status_code=response.status_code,
        registry=registry,
        config=scoring,
    )


def scan_many(
    urls: Iterable[str],
    *,
    config: dict[str, Any] | None = None,
    max_workers: int | None = None,
) -> list[ScanResult]:
    """Scan several URLs in parallel; results keep the input order."""
    urls = list(urls)
    config = config or DEFAULTS
    scoring = scoring_config(config)
    # built once, shared read-only by every worker
    registry = build_registry(scoring.weights)
    workers = max_workers or (config.get("scan") or {}).get("max_workers", 4)

    def scan(url: str) -> ScanResult:
        return run_scan(url, config=config, registry=registry, scoring=scoring)

    if len(urls) <= 1:
        return [scan(u) for u in urls]
    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(urls)))) as pool:
        return list(pool.map(scan, urls))
