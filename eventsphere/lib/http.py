"""
HTTP helper for provider APIs: JSON GET with retry and exponential backoff.
"""

import time
from typing import Optional, Dict, Any

import requests

from eventsphere.config import Config


USER_AGENT = "Mozilla/5.0 (compatible; EventSphereBot/1.0; +https://eventsphere.app/bot)"
RETRYABLE_STATUS = (408, 429, 500, 502, 503, 504)


class SourceFetchError(RuntimeError):
    pass


def request_json(url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None,
                 retries: Optional[int] = None, backoff_sec: float = 0.8, timeout: Optional[int] = None) -> Dict[str, Any]:
    retries = retries if retries is not None else Config.MAX_RETRIES
    timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT
    request_headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    request_headers.update(headers or {})

    last_exc: Optional[Exception] = None
    for attempt in range(retries):
        try:
            resp = requests.get(url, params=params, headers=request_headers, timeout=timeout)
        except requests.RequestException as exc:  # network error
            last_exc = exc
            time.sleep(backoff_sec * (2 ** attempt))
            continue

        if resp.status_code == 200:
            try:
                return resp.json()
            except ValueError as exc:
                raise SourceFetchError(f"Invalid JSON from {url}: {exc}")
        # Retry on common transient codes
        if resp.status_code in RETRYABLE_STATUS:
            last_exc = SourceFetchError(f"HTTP {resp.status_code}: {resp.text[:200]}")
            time.sleep(backoff_sec * (2 ** attempt))
            continue
        # Non-retryable
        raise SourceFetchError(f"HTTP {resp.status_code}: {resp.text[:200]}")

    if last_exc:
        raise SourceFetchError(str(last_exc))
    raise SourceFetchError(f"Unknown request failure for {url}")
