"""Instapaper Full API client.

Every call is an OAuth 1.0a signed form POST. The access token is obtained
lazily through xAuth (username/password "client_auth"), kept in an
``OAuthSession`` for the life of the client, and dropped on any 401/403 so
the next call re-authenticates.
"""

import logging
from typing import Dict, Optional
from urllib.parse import urlencode

from arxivsync.errors import DEFAULT_RETRY_AFTER, ErrorKind, InstapaperError
from arxivsync.http import HttpClient, HttpResponse, TransportError
from arxivsync.oauth import AccessToken, Consumer, parse_token_response, sign_request
from arxivsync.result import Err, Result, err, map_result, ok

log = logging.getLogger(__name__)

_BASE = "https://www.instapaper.com"
_ACCESS_TOKEN = "/api/1/oauth/access_token"
_LIST = "/api/1/bookmarks/list"
_ARCHIVE = "/api/1/bookmarks/archive"
_VERIFY = "/api/1/account/verify_credentials"

BOOKMARK_LIST_LIMIT = 500


class OAuthSession:
    """Holds the access token pair between requests.

    Two states: empty (no token) and established. ``establish`` moves to the
    established state, ``invalidate`` back to empty.
    """

    def __init__(self) -> None:
        self._token: Optional[AccessToken] = None

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    @property
    def is_established(self) -> bool:
        return self._token is not None

    def establish(self, token: AccessToken) -> None:
        self._token = token
        log.debug("Instapaper session established")

    def invalidate(self) -> None:
        if self._token is not None:
            log.info("Instapaper session invalidated, will re-authenticate")
        self._token = None


def _retry_after(resp: HttpResponse) -> int:
    try:
        return int(resp.header("retry-after"))
    except ValueError:
        return DEFAULT_RETRY_AFTER


class InstapaperClient:
    def __init__(
        self,
        username: str,
        password: str,
        consumer_key: str,
        consumer_secret: str,
        http: Optional[HttpClient] = None,
        session: Optional[OAuthSession] = None,
    ) -> None:
        self.username = username
        self.password = password
        self.consumer = Consumer(key=consumer_key, secret=consumer_secret)
        self.http = http or HttpClient()
        self.session = session or OAuthSession()

    # -- Authentication --

    def get_access_token(self) -> "Result[AccessToken, InstapaperError]":
        """Return the cached token, or exchange credentials for a new one."""
        if self.session.token is not None:
            return ok(self.session.token)

        url = _BASE + _ACCESS_TOKEN
        body = {
            "x_auth_username": self.username,
            "x_auth_password": self.password,
            "x_auth_mode": "client_auth",
        }
        try:
            resp = self._post(url, body, token=None)
        except TransportError as exc:
            return err(InstapaperError(ErrorKind.NETWORK_ERROR, str(exc)))
        except Exception as exc:
            log.exception("Unexpected error requesting Instapaper access token")
            return err(InstapaperError(ErrorKind.UNKNOWN_ERROR, str(exc)))

        if resp.status == 200:
            token = parse_token_response(resp.text)
            if token is None:
                return err(InstapaperError(
                    ErrorKind.INVALID_RESPONSE, "Failed to parse OAuth token response",
                ))
            self.session.establish(token)
            return ok(token)

        if resp.status in (401, 403):
            return err(InstapaperError(ErrorKind.AUTH_FAILED, "Invalid Instapaper credentials"))

        return err(InstapaperError(
            ErrorKind.INVALID_RESPONSE, f"Unexpected status code: {resp.status}",
        ))

    # -- Signed requests --

    def _post(
        self, url: str, params: Dict[str, str], token: Optional[AccessToken],
    ) -> HttpResponse:
        auth_header = sign_request("POST", url, params, self.consumer, token)
        return self.http.request(
            url,
            method="POST",
            headers={
                "Authorization": auth_header,
                "Content-Type": "application/x-www-form-urlencoded",
            },
            body=urlencode(params),
        )

    def _status_error(self, resp: HttpResponse) -> InstapaperError:
        if resp.status in (401, 403):
            self.session.invalidate()
            return InstapaperError(ErrorKind.AUTH_FAILED, "Invalid Instapaper credentials")
        if resp.status == 429:
            wait = _retry_after(resp)
            log.warning("Instapaper rate limit hit, retry after %ds", wait)
            return InstapaperError(ErrorKind.RATE_LIMITED, retry_after=wait)
        return InstapaperError(
            ErrorKind.INVALID_RESPONSE, f"Unexpected status code: {resp.status}",
        )

    def request(
        self, endpoint: str, params: Optional[Dict[str, str]] = None,
    ) -> "Result[str, InstapaperError]":
        """Signed POST to an API endpoint, returning the response body."""
        token_result = self.get_access_token()
        if isinstance(token_result, Err):
            return token_result

        url = _BASE + endpoint
        try:
            resp = self._post(url, params or {}, token=token_result.value)
        except TransportError as exc:
            return err(InstapaperError(ErrorKind.NETWORK_ERROR, str(exc)))
        except Exception as exc:
            log.exception("Unexpected error calling Instapaper %s", endpoint)
            return err(InstapaperError(ErrorKind.UNKNOWN_ERROR, str(exc)))

        if resp.status == 200:
            return ok(resp.text)
        return err(self._status_error(resp))

    # -- Endpoints --

    def verify_credentials(self) -> "Result[bool, InstapaperError]":
        return map_result(self.request(_VERIFY), lambda _: True)

    def fetch_bookmarks(self, limit: int = BOOKMARK_LIST_LIMIT) -> "Result[str, InstapaperError]":
        return self.request(_LIST, {"limit": str(limit)})

    def archive_bookmark(self, bookmark_id: str) -> "Result[None, InstapaperError]":
        result = self.request(_ARCHIVE, {"bookmark_id": str(bookmark_id)})
        return map_result(result, lambda _: None)
