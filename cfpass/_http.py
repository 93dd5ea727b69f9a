"""Transport-neutral request and response types.

The solving pipeline only ever sees these two classes. Transports
(rnet, an intercepting proxy, a test double) convert to and from them.
"""

import time
from urllib.parse import urlparse, urlsplit, urlunsplit

from cfpass._cookies import (
    cookies_from_headers,
    format_cookie_header,
    parse_cookie_header,
)


def _strip_tls_port(netloc: str) -> str:
    """Drop an explicit :443 port suffix from a netloc."""
    host, sep, port = netloc.rpartition(":")
    if sep and port == "443":
        return host
    return netloc


def strip_url_tls_port(url: str) -> str:
    """Drop an explicit :443 port from the netloc of ``url`` only."""
    parts = urlsplit(url)
    return urlunsplit(parts._replace(netloc=_strip_tls_port(parts.netloc)))


class Request:
    """Outbound HTTP request.

    - ``method``: upper-case HTTP method
    - ``url``: absolute URL
    - ``headers``: dict[str, str] as the caller wrote them
    - ``cookies``: dict[str, str], rendered into ``Cookie`` on send
    - ``body``: raw bytes, kept so the request can be replayed
    """

    __slots__ = ("method", "url", "headers", "cookies", "body")

    def __init__(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        cookies: dict[str, str] | None = None,
        body: bytes | None = None,
    ):
        self.method = method.upper()
        self.url = url
        self.headers = dict(headers or {})
        self.cookies = dict(cookies or {})
        self.body = body

    @property
    def scheme(self) -> str:
        return urlparse(self.url).scheme

    @property
    def host(self) -> str:
        """Host as used in challenge URLs, without an explicit :443."""
        return _strip_tls_port(urlparse(self.url).netloc)

    def get_header(self, name: str) -> str | None:
        lname = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lname:
                return value
        return None

    def has_header(self, name: str) -> bool:
        return self.get_header(name) is not None

    def remove_header(self, name: str) -> None:
        lname = name.lower()
        for key in [k for k in self.headers if k.lower() == lname]:
            del self.headers[key]

    def add_cookie(self, name: str, value: str) -> None:
        self.cookies[name] = value

    def prepared_headers(self) -> dict[str, str]:
        """Headers to put on the wire, with cookies folded into Cookie."""
        headers = dict(self.headers)
        if not self.cookies:
            return headers
        existing = self.get_header("cookie")
        merged = parse_cookie_header(existing) if existing else {}
        merged.update(self.cookies)
        for key in [k for k in headers if k.lower() == "cookie"]:
            del headers[key]
        headers["Cookie"] = format_cookie_header(merged)
        return headers

    def __repr__(self) -> str:
        return f"<Request [{self.method} {self.url}]>"


class Response:
    """Inbound HTTP response.

    ``headers`` keys are lowercase. Set-Cookie values are kept apart in
    ``set_cookies`` because joining them into one header loses cookie
    boundaries. ``received_at`` is a ``time.monotonic()`` stamp taken
    when the response arrived.
    """

    __slots__ = (
        "status_code",
        "headers",
        "url",
        "_content",
        "_text",
        "set_cookies",
        "location",
        "received_at",
    )

    def __init__(
        self,
        *,
        status_code: int,
        headers: dict[str, str] | None = None,
        url: str = "",
        content: bytes = b"",
        text: str | None = None,
        set_cookies: list[str] | None = None,
        location: str | None = None,
        received_at: float | None = None,
    ):
        self.status_code = status_code
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.url = url
        if not content and text is not None:
            content = text.encode("utf-8")
        self._content = content
        self._text = text
        self.set_cookies = list(set_cookies or [])
        if location is None:
            location = self.headers.get("location") or None
        self.location = location
        self.received_at = (
            received_at if received_at is not None else time.monotonic()
        )

    @property
    def content(self) -> bytes:
        return self._content

    @property
    def text(self) -> str:
        if self._text is None:
            self._text = self._content.decode("utf-8", errors="replace")
        return self._text

    def get_all(self, key: str) -> list[str]:
        """Return all values for a header (Set-Cookie entries split out)."""
        key = key.lower()
        if key == "set-cookie":
            return list(self.set_cookies)
        val = self.headers.get(key, "")
        return [val] if val else []

    def cookies(self) -> dict[str, str]:
        return cookies_from_headers(self.set_cookies)

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"
