"""HTTP capability shared by the Instapaper and arXiv clients.

Wraps ``requests`` so callers see a status/text/headers triple for every
response that arrived, and a ``TransportError`` when none did.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests

from arxivsync import config

log = logging.getLogger(__name__)

USER_AGENT = "arxivsync/0.1"


class TransportError(Exception):
    """The request never produced an HTTP response (DNS, connect, timeout)."""


@dataclass(frozen=True)
class HttpResponse:
    status: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)


class HttpClient:
    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT

    def request(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> HttpResponse:
        """Issue one request. Non-2xx statuses are returned, not raised."""
        all_headers = {"User-Agent": USER_AGENT, **(headers or {})}
        try:
            resp = requests.request(
                method, url, headers=all_headers, data=body, timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            log.debug("%s %s failed: %s", method, url, exc)
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        log.debug("%s %s -> %d", method, url, resp.status_code)
        return HttpResponse(
            status=resp.status_code,
            text=resp.text,
            headers={k.lower(): v for k, v in resp.headers.items()},
        )
