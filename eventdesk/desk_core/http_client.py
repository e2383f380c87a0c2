"""
Shared HTTP session: connection pooling, connection-level retry, CA bundle.

Status-code retries are absent. A stats poll that fails is
simply reported for that tick; the Poller decides whether to try again.
"""

import certifi
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import DESK_VERSION

_retry_strategy = Retry(
    total=2,
    connect=2,
    read=0,
    status=0,
    backoff_factor=0.5,                         # 0.5s, 1s between reconnects
    allowed_methods=["GET"],
    raise_on_status=False,
)


def create_session(auth_token=None):
    """Create a requests.Session with pooling, reconnect retry and certifi CAs."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=2,
        pool_maxsize=4,                         # foreground + background ticks overlap
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = certifi.where()
    session.headers["User-Agent"] = f"EventDesk/{DESK_VERSION}"
    session.headers["Accept"] = "application/json"
    if auth_token:
        session.headers["Authorization"] = f"Bearer {auth_token}"
    return session


def reset_session(session, auth_token=None):
    """Close and recreate the HTTP session (fixes stale connections)."""
    try:
        session.close()
    except requests.RequestException:
        pass
    return create_session(auth_token)
