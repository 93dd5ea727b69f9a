"""BypassClient -- direct-client integration of the challenge solver."""

import datetime
import logging
import threading

from cfpass._diagnostics import DumpConfig
from cfpass._evaluator import EngineFactory
from cfpass._http import Request, Response
from cfpass._solver import bypass
from cfpass._transport import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_TIMEOUT,
    RnetTransport,
)

logger = logging.getLogger("cfpass")

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br, zstd",
    "Upgrade-Insecure-Requests": "1",
}


class BypassClient:
    """Synchronous HTTP client that passes the JS challenge transparently.

    Every response goes through ``bypass``: non-challenge responses are
    returned as-is, challenged ones are solved and the request retried.
    Holds no state between requests besides the transport, so one
    instance can serve several threads.

    Args:
        dump: Dump full request/response headers to the debug log.
        dump_body: Include bodies in those dumps.
        engine_factory: Script engine factory (default MiniRacer).
        headers: Headers sent with every request (default
            ``DEFAULT_HEADERS``); per-request headers override them.
        emulation: rnet ``Emulation`` profile for the TLS fingerprint.
        transport: Callable ``send(request) -> Response``; replaces the
            rnet transport entirely when given.
    """

    def __init__(
        self,
        *,
        dump: bool = False,
        dump_body: bool = False,
        engine_factory: EngineFactory | None = None,
        headers: dict[str, str] | None = None,
        emulation=None,
        connect_timeout: float | datetime.timedelta = DEFAULT_CONNECT_TIMEOUT,
        timeout: float | datetime.timedelta = DEFAULT_TIMEOUT,
        transport=None,
    ):
        self.dump = DumpConfig(enabled=dump, include_body=dump_body)
        self.engine_factory = engine_factory
        self.headers = dict(DEFAULT_HEADERS if headers is None else headers)
        if transport is None:
            transport = RnetTransport(
                emulation=emulation,
                connect_timeout=connect_timeout,
                timeout=timeout,
            )
        self._send = transport

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        cookies: dict[str, str] | None = None,
        body: bytes | str | None = None,
        cancel: threading.Event | None = None,
    ) -> Response:
        """Send a request, solving a JS challenge if one comes back."""
        merged = dict(self.headers)
        if headers:
            merged.update(headers)
        if isinstance(body, str):
            body = body.encode("utf-8")
        req = Request(method, url, headers=merged, cookies=cookies, body=body)

        logger.debug("%s %s", req.method, url)
        resp = self._send(req)
        return bypass(
            resp,
            req,
            self._send,
            dump=self.dump,
            engine_factory=self.engine_factory,
            cancel=cancel,
        )

    def get(self, url: str, **kwargs) -> Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> Response:
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        close = getattr(self._send, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
