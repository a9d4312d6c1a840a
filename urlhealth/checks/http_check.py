from __future__ import annotations

import logging

import requests
import urllib3
from requests.adapters import HTTPAdapter

from urlhealth.checks.results import RawAttemptResult, Responded, TransportError

logger = logging.getLogger(__name__)


def describe_error(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def probe(session: requests.Session, url: str, timeout_s: float) -> RawAttemptResult:
    """
    Perform exactly one GET against url.

    Any response counts as Responded, whatever its status class; only
    transport-level failures (DNS, refused connection, timeout, bad URL)
    become TransportError. Only the status line and headers are awaited;
    the body is never read.
    """
    try:
        r = session.get(url, timeout=timeout_s, stream=True)
    # urllib3 lets some URL parse errors through unwrapped.
    except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
        logger.debug("GET %s failed: %s", url, e)
        return TransportError(describe_error(e))
    r.close()
    return Responded(r.status_code)


def build_session(pool_size: int, user_agent: str | None = None) -> requests.Session:
    """One client shared by every worker; its pool holds a connection per worker."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    if user_agent:
        session.headers.update({"User-Agent": user_agent})
    return session
