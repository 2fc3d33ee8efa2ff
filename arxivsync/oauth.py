"""OAuth 1.0a request signing (HMAC-SHA1) on top of oauthlib.

Builds the ``Authorization`` header for Instapaper's xAuth API. A fresh nonce
and timestamp are drawn for every request; the token pair is reused.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from oauthlib.common import generate_nonce, generate_timestamp, urldecode
from oauthlib.oauth1.rfc5849 import signature, utils

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


@dataclass(frozen=True)
class Consumer:
    key: str
    secret: str


@dataclass(frozen=True)
class AccessToken:
    token: str
    secret: str


def percent_encode(value) -> str:
    """RFC 3986 percent-encoding; only ALPHA / DIGIT / "-._~" stay literal."""
    return utils.escape(str(value))


def parameter_string(params: Dict[str, str]) -> str:
    """Encode, sort by encoded key and join as ``k=v&k=v``."""
    pairs = [(k, str(v)) for k, v in params.items() if v is not None]
    return signature.normalize_parameters(pairs)


def signature_base_string(method: str, url: str, params: Dict[str, str]) -> str:
    return signature.signature_base_string(
        method, signature.base_string_uri(url), parameter_string(params),
    )


def sign_request(
    method: str,
    url: str,
    params: Dict[str, str],
    consumer: Consumer,
    token: Optional[AccessToken] = None,
    nonce: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> str:
    """Return the full ``Authorization`` header value for one request.

    Args:
        method: HTTP method; upper-cased for the base string.
        url: Request URL. Any query string is dropped before signing.
        params: Form body parameters, included in the signature.
        consumer: Application consumer key and secret.
        token: Access token pair, omitted for the initial xAuth exchange.
        nonce, timestamp: Overrides for deterministic signing.
    """
    oauth_params = {
        "oauth_consumer_key": consumer.key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp or generate_timestamp(),
        "oauth_version": OAUTH_VERSION,
    }
    if token is not None and token.token:
        oauth_params["oauth_token"] = token.token

    base = signature_base_string(method, url, {**params, **oauth_params})
    oauth_params["oauth_signature"] = signature.sign_hmac_sha1(
        base, consumer.secret, token.secret if token else None,
    )

    header_params = ", ".join(
        f'{percent_encode(k)}="{percent_encode(v)}"'
        for k, v in sorted(oauth_params.items())
        if v
    )
    return f"OAuth {header_params}"


def parse_token_response(text: str) -> Optional[AccessToken]:
    """Extract the token pair from a ``key=value&key=value`` response body.

    Returns None unless both oauth_token and oauth_token_secret are present
    and non-empty.
    """
    try:
        params = dict(urldecode(text.strip()))
    except ValueError:
        return None
    token = params.get("oauth_token", "")
    secret = params.get("oauth_token_secret", "")
    if token and secret:
        return AccessToken(token=token, secret=secret)
    return None
