"""
Backend API — SnapshotSource fetches /stats and /current-series.

Blocking calls, made from worker threads only (never from the Tk main
thread). One attempt per endpoint; retry policy lives in the Poller.
"""

import time

import requests

from .constants import STATS_PATH, SERIES_PATH, FETCH_TIMEOUT_SEC
from .config import log
from .errors import NetworkError, ParseError, AuthError
from .state import Snapshot
from . import http_client

_STATS_FIELDS = {
    "total_count": "totalRegistrations",
    "total_amount": "totalMoney",
    "today_count": "todayRegistrations",
    "period_count": "monthRegistrations",
}


def _as_count(payload, key):
    """Non-negative integer field. Fractional numbers are truncated."""
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"{key} is missing or not a number: {value!r}")
    try:
        value = int(value)
    except (ValueError, OverflowError) as e:
        raise ParseError(f"{key} is not a finite number: {value!r}") from e
    if value < 0:
        raise ParseError(f"{key} is negative: {value}")
    return value


class SnapshotSource:
    """Pull-only boundary to the backend. No state beyond the HTTP session."""

    def __init__(self, config, session=None):
        self._base_url = config["serverUrl"].rstrip("/")
        self._timeout = min(config.get("fetchTimeoutSec", FETCH_TIMEOUT_SEC), FETCH_TIMEOUT_SEC)
        self._auth_token = config.get("authToken")
        self._session = session or http_client.create_session(self._auth_token)

    def reset(self):
        """Drop pooled connections after repeated transport failures."""
        self._session = http_client.reset_session(self._session, self._auth_token)

    def fetch(self):
        """Fetch one Snapshot. Raises NetworkError, AuthError or ParseError."""
        stats = self._get_json(STATS_PATH)
        series = self._get_json(SERIES_PATH)

        counts = {attr: _as_count(stats, key) for attr, key in _STATS_FIELDS.items()}

        identifier = series.get("seriesId")
        if not isinstance(identifier, str) or not identifier.strip():
            raise ParseError(f"seriesId is missing or empty: {identifier!r}")

        snapshot = Snapshot(identifier=identifier.strip(), fetched_at=time.time(), **counts)
        log.debug("Snapshot: total=%d amount=%d id=%s",
                  snapshot.total_count, snapshot.total_amount, snapshot.identifier)
        return snapshot

    def _get_json(self, path):
        url = f"{self._base_url}{path}"
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.Timeout as e:
            raise NetworkError(f"GET {path} timed out after {self._timeout}s") from e
        except requests.RequestException as e:
            raise NetworkError(f"GET {path} failed: {e}") from e

        if resp.status_code in (401, 403):
            raise AuthError(f"GET {path} rejected: HTTP {resp.status_code}")
        if not 200 <= resp.status_code < 300:
            raise NetworkError(f"GET {path} failed: HTTP {resp.status_code} — {resp.text[:200]}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise ParseError(f"GET {path} returned malformed JSON") from e
        if not isinstance(payload, dict):
            raise ParseError(f"GET {path} returned {type(payload).__name__}, expected object")
        return payload
