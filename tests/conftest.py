"""Shared mock objects and fixtures for cfpass tests."""

from pathlib import Path

from cfpass._http import Request, Response

FIXTURES = Path(__file__).parent / "fixtures"

# Expected answers for the stored challenge pages.
GET_PAGE_HOST = "example.com"
GET_PAGE_ANSWER = "28.1500000000"
POST_PAGE_HOST = "www.example.org"
POST_PAGE_ANSWER = "17.9069767442"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Mock rnet types
# ---------------------------------------------------------------------------


class MockStatus:
    def __init__(self, code: int):
        self._code = code

    def as_int(self) -> int:
        return self._code


class MockHeaderMap:
    """Mock rnet HeaderMap with bytes keys and bytes values.

    Accepts a dict or a list of (name, value) pairs so tests can send
    repeated headers such as Set-Cookie.
    """

    def __init__(self, data=None):
        self._raw: dict[bytes, list[bytes]] = {}
        items = data.items() if isinstance(data, dict) else (data or [])
        for k, v in items:
            bk = k.lower().encode("ascii")
            self._raw.setdefault(bk, []).append(v.encode("utf-8"))

    def keys(self):
        return list(self._raw.keys())

    def get(self, key):
        if isinstance(key, str):
            key = key.lower().encode("ascii")
        vals = self._raw.get(key)
        return vals[0] if vals else None

    def get_all(self, key):
        if isinstance(key, str):
            key = key.lower().encode("ascii")
        return list(self._raw.get(key, []))


class MockRnetResponse:
    def __init__(self, status_code: int, headers=None, body: str = ""):
        self.status = MockStatus(status_code)
        self.headers = MockHeaderMap(headers)
        self._body = body

    def bytes(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body.encode("utf-8")


class MockClient:
    """Mock rnet client that returns responses from a sequence."""

    def __init__(self, responses):
        self._responses = responses
        self._index = 0
        self.request_log: list[tuple] = []

    def request(self, method, url, **kwargs):
        resp = self._responses[min(self._index, len(self._responses) - 1)]
        self._index += 1
        self.request_log.append((method, url, kwargs))
        if isinstance(resp, Exception):
            raise resp
        return resp


# ---------------------------------------------------------------------------
# Pipeline doubles
# ---------------------------------------------------------------------------


class FakeEngine:
    """Script engine double that records what it was asked to run."""

    def __init__(self, result="1.0000000000", error: Exception | None = None):
        self.result = result
        self.error = error
        self.programs: list[str] = []
        self.closed = False

    def eval(self, code):
        self.programs.append(code)
        if self.error is not None:
            raise self.error
        return self.result


class EngineRecorder:
    """Engine factory that hands out a new FakeEngine per call."""

    def __init__(self, result="1.0000000000", error: Exception | None = None):
        self.result = result
        self.error = error
        self.engines: list[FakeEngine] = []

    def __call__(self):
        engine = FakeEngine(self.result, self.error)
        engine.close = lambda: setattr(engine, "closed", True)
        self.engines.append(engine)
        return engine


class FakeSend:
    """Transport double: pops responses (or raises exceptions) in order."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.sent: list[Request] = []

    def __call__(self, request):
        self.sent.append(request)
        resp = self._responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def challenge_response(
    body: str,
    *,
    status_code: int = 503,
    url: str = "https://example.com/",
    set_cookies: list[str] | None = None,
    location: str | None = None,
    received_at: float | None = None,
) -> Response:
    return Response(
        status_code=status_code,
        headers={"Server": "cloudflare", "Content-Type": "text/html"},
        url=url,
        text=body,
        set_cookies=set_cookies,
        location=location,
        received_at=received_at,
    )
