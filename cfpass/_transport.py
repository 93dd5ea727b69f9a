"""RnetTransport -- synchronous transport wrapping rnet.blocking.Client."""

import datetime
import logging
import time

import rnet.blocking
from rnet import Method

from cfpass._errors import BodyReadError, TransportError
from cfpass._http import Request, Response

logger = logging.getLogger("cfpass")

# Challenge forms only use GET and POST; the rest cover callers of
# BypassClient.request.
_METHODS: dict[str, Method] = {
    name: getattr(Method, name)
    for name in ("GET", "POST", "PUT", "DELETE", "HEAD", "PATCH")
}

DEFAULT_CONNECT_TIMEOUT = datetime.timedelta(seconds=10)
DEFAULT_TIMEOUT = datetime.timedelta(seconds=30)


def _to_method(method: str) -> Method:
    rnet_method = _METHODS.get(method.upper())
    if rnet_method is None:
        raise ValueError(f"Unsupported HTTP method: {method}")
    return rnet_method


def _as_timedelta(seconds) -> datetime.timedelta:
    """rnet takes timedeltas; accept plain seconds too."""
    if isinstance(seconds, datetime.timedelta):
        return seconds
    return datetime.timedelta(seconds=float(seconds))


def _decode_headers(header_map) -> tuple[dict[str, str], list[str]]:
    """Decode rnet HeaderMap to a lowercase dict plus Set-Cookie values.

    rnet's HeaderMap: keys() returns unique bytes keys, get_all()
    returns every value for a key. Set-Cookie is returned separately
    so individual cookies survive; other repeated headers are joined.
    """
    headers: dict[str, str] = {}
    set_cookies: list[str] = []
    for raw_key in header_map.keys():
        k = raw_key.decode("ascii", errors="replace").lower()
        values = [
            v.decode("utf-8", errors="replace") for v in header_map.get_all(k)
        ]
        if k == "set-cookie":
            set_cookies.extend(values)
        else:
            headers[k] = ", ".join(values)
    return headers, set_cookies


class RnetTransport:
    """Sends ``Request`` objects through rnet and returns ``Response``.

    Redirects are not followed and no cookie store is kept: the
    challenge flow needs to see every Set-Cookie itself, and cookies
    live on the ``Request`` instead.
    """

    def __init__(
        self,
        *,
        emulation=None,
        connect_timeout: float | datetime.timedelta = DEFAULT_CONNECT_TIMEOUT,
        timeout: float | datetime.timedelta = DEFAULT_TIMEOUT,
        client=None,
    ):
        if client is None:
            kwargs = {
                "connect_timeout": _as_timedelta(connect_timeout),
                "timeout": _as_timedelta(timeout),
                "cookie_store": False,
            }
            if emulation is not None:
                kwargs["emulation"] = emulation
            client = rnet.blocking.Client(**kwargs)
        self._client = client

    def send(self, request: Request) -> Response:
        kwargs = {"headers": request.prepared_headers()}
        if request.body is not None:
            kwargs["body"] = request.body

        try:
            resp = self._client.request(
                _to_method(request.method), request.url, **kwargs
            )
        except Exception as e:
            raise TransportError(request.url, str(e)) from e
        received_at = time.monotonic()

        status = resp.status.as_int()
        headers, set_cookies = _decode_headers(resp.headers)
        try:
            content = resp.bytes()
        except Exception as e:
            raise BodyReadError(request.url, str(e)) from e

        return Response(
            status_code=status,
            headers=headers,
            url=request.url,
            content=content,
            set_cookies=set_cookies,
            received_at=received_at,
        )

    __call__ = send
