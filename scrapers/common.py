from __future__ import annotations

import socket
import urllib.request
from datetime import datetime, timezone
from urllib.error import HTTPError, URLError

from feed_policy import FEED_POLICY

DEFAULT_TIMEOUT_SECONDS = FEED_POLICY["fetch_timeout_seconds"]
MAX_REDIRECTS = FEED_POLICY["max_redirects"]
USER_AGENT = FEED_POLICY["user_agent"]


class FetchError(Exception):
    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RedirectLimitHandler(urllib.request.HTTPRedirectHandler):
    """Follow redirects, giving up after ``max_redirections`` hops."""

    def __init__(self, max_redirections: int = MAX_REDIRECTS) -> None:
        super().__init__()
        self.max_redirections = max_redirections
        self.max_repeats = min(self.max_repeats, max_redirections)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _is_timeout(err: Exception) -> bool:
    if isinstance(err, (socket.timeout, TimeoutError)):
        return True
    reason = getattr(err, "reason", None)
    return isinstance(reason, (socket.timeout, TimeoutError))


def fetch_url(
    url: str,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
    max_redirects: int = MAX_REDIRECTS,
) -> str:
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }
    req = urllib.request.Request(url, headers=headers)
    opener = urllib.request.build_opener(RedirectLimitHandler(max_redirects))
    try:
        with opener.open(req, timeout=timeout) as response:
            charset = response.headers.get_content_charset() if getattr(response, "headers", None) else None
            return response.read().decode(charset or "utf-8", errors="replace")
    except HTTPError as err:
        location = err.headers.get("Location") if err.headers is not None else None
        if 300 <= err.code < 400 and location:
            raise FetchError(
                f"Too many redirects fetching {url} (limit {max_redirects}): HTTP {err.code} to {location}",
                status=err.code,
            ) from err
        if 300 <= err.code < 400:
            raise FetchError(f"HTTP {err.code} without a Location header fetching {url}", status=err.code) from err
        raise FetchError(f"HTTP {err.code} fetching {url}", status=err.code) from err
    except URLError as err:
        if _is_timeout(err):
            raise FetchError(f"Timed out after {timeout}s fetching {url}") from err
        raise FetchError(f"Failed to fetch URL: {url}: {err.reason}") from err
    except (socket.timeout, TimeoutError) as err:
        raise FetchError(f"Timed out after {timeout}s fetching {url}") from err
    except OSError as err:
        raise FetchError(f"Failed to fetch URL: {url}: {err}") from err
