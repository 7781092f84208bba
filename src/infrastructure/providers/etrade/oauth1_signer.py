"""OAuth 1.0a HMAC-SHA1 request signing (RFC 5849).

E*TRADE authenticates every request, including the token handshake, with
an OAuth 1.0a signature. Each call gets a fresh nonce and timestamp.

Signature:
    base string = METHOD & pct(normalized URL) & pct(sorted encoded params)
    key         = pct(consumer_secret) & pct(token_secret)
    signature   = base64(HMAC-SHA1(key, base string))

The parameter set is the union of the oauth_* parameters and the request's
query parameters, each RFC 3986 percent-encoded, sorted by name then value.

Reference:
    - RFC 5849 section 3.4
"""

import base64
import hashlib
import hmac
import secrets
import time
from collections.abc import Mapping
from urllib.parse import quote, urlsplit, urlunsplit

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def percent_encode(value: str) -> str:
    """RFC 3986 encoding: only unreserved characters stay literal."""
    return quote(value, safe="~")


def normalize_url(url: str) -> str:
    """Base string URI: lowercase scheme and host, no default port, no query."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower()
    if (scheme, parts.port) in (("http", 80), ("https", 443)):
        netloc = netloc.rsplit(":", 1)[0]
    return urlunsplit((scheme, netloc, parts.path or "/", "", ""))


def normalize_parameters(params: Mapping[str, str]) -> str:
    """Encode, sort and join request parameters."""
    encoded = sorted(
        (percent_encode(str(key)), percent_encode(str(value)))
        for key, value in params.items()
    )
    return "&".join(f"{key}={value}" for key, value in encoded)


def signature_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    return "&".join(
        (
            method.upper(),
            percent_encode(normalize_url(url)),
            percent_encode(normalize_parameters(params)),
        )
    )


class OAuth1Signer:
    """Builds signed OAuth 1.0a Authorization headers for one consumer.

    Thread-safe: holds only the consumer key pair.

    Example:
        >>> signer = OAuth1Signer(consumer_key="key", consumer_secret="secret")
        >>> header = signer.authorization_header(
        ...     "GET",
        ...     "https://apisb.etrade.com/v1/accounts/list",
        ...     token=access_token,
        ...     token_secret=access_token_secret,
        ... )
    """

    def __init__(self, *, consumer_key: str, consumer_secret: str) -> None:
        self._consumer_key = consumer_key
        self._consumer_secret = consumer_secret

    def sign(
        self,
        method: str,
        url: str,
        params: Mapping[str, str],
        token_secret: str | None = None,
    ) -> str:
        """Compute the base64 HMAC-SHA1 signature over params."""
        key = f"{percent_encode(self._consumer_secret)}&{percent_encode(token_secret or '')}"
        base_string = signature_base_string(method, url, params)
        digest = hmac.new(key.encode(), base_string.encode(), hashlib.sha1).digest()
        return base64.b64encode(digest).decode()

    def oauth_parameters(
        self,
        *,
        token: str | None = None,
        extra: Mapping[str, str] | None = None,
        nonce: str | None = None,
        timestamp: str | None = None,
    ) -> dict[str, str]:
        """Protocol parameters for one request (unsigned)."""
        params = {
            "oauth_consumer_key": self._consumer_key,
            "oauth_nonce": nonce or secrets.token_hex(16),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": timestamp or str(int(time.time())),
            "oauth_version": OAUTH_VERSION,
        }
        if token:
            params["oauth_token"] = token
        if extra:
            params.update(extra)
        return params

    def authorization_header(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        token_secret: str | None = None,
        query_params: Mapping[str, str] | None = None,
        extra_oauth_params: Mapping[str, str] | None = None,
        nonce: str | None = None,
        timestamp: str | None = None,
    ) -> str:
        """Build the ``Authorization: OAuth ...`` header value.

        Args:
            method: HTTP method.
            url: Request URL without query string.
            token: Request or access token (absent for the request-token call).
            token_secret: Secret paired with token.
            query_params: Query parameters sent with the request (signed).
            extra_oauth_params: oauth_callback / oauth_verifier.
            nonce: Fixed nonce (tests only).
            timestamp: Fixed timestamp (tests only).
        """
        oauth_params = self.oauth_parameters(
            token=token,
            extra=extra_oauth_params,
            nonce=nonce,
            timestamp=timestamp,
        )
        signed = {**(query_params or {}), **oauth_params}
        oauth_params["oauth_signature"] = self.sign(method, url, signed, token_secret)

        fields = ",".join(
            f'{percent_encode(key)}="{percent_encode(value)}"'
            for key, value in sorted(oauth_params.items())
        )
        return f'OAuth realm="",{fields}'
