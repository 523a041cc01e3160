"""
Shared HTTP client with a default timeout.

Provides a pre-configured ``requests.Session`` for talking to Esri REST
services. Transport failures are not retried by default: a connection error or
timeout reaches the caller on first occurrence, as the unwrapped
``requests`` exception. Pass a ``Retry`` (or set
``FOREST_INVASIVES_HTTP_RETRIES``) to opt in.

Usage::

    from forest_invasives.services.http import session

    resp = session.send(query.prepare())
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

#: No automatic retries; non-success statuses are returned, not raised.
#: ``read=False`` re-raises read timeouts as-is so they surface as
#: ``requests.ReadTimeout`` rather than a generic connection error.
DEFAULT_RETRY = Retry(total=0, read=False, raise_on_status=False)

DEFAULT_TIMEOUT = 30  # seconds

USER_AGENT = "forest-invasives/0.1"


def retry_policy(retries: int) -> Retry:
    """Opt-in retry strategy for idempotent requests (``0`` disables)."""
    if retries <= 0:
        return DEFAULT_RETRY
    return Retry(
        total=retries,
        backoff_factor=2,  # 0s, 2s, 4s, ...
        status_forcelist=[429, 502, 503, 504],
        allowed_methods=["GET", "HEAD"],
        raise_on_status=False,
    )


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = USER_AGENT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with the retry adapter mounted.

    Args:
        retry: Retry strategy (defaults to ``DEFAULT_RETRY``: none).
        timeout: Default timeout applied to every request.
        user_agent: ``User-Agent`` header value.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = user_agent

    # Inject the default timeout so callers don't need to pass ``timeout=``.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session; import and use directly.
session: requests.Session = create_session()
