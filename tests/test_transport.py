"""Tests for the rnet transport and BypassClient."""

from unittest.mock import patch

import pytest
from rnet import Method

from cfpass._client import DEFAULT_HEADERS, BypassClient
from cfpass._errors import BodyReadError, TransportError
from cfpass._http import Request
from cfpass._transport import RnetTransport, _decode_headers, _to_method
from tests.conftest import (
    GET_PAGE_ANSWER,
    EngineRecorder,
    MockClient,
    MockHeaderMap,
    MockRnetResponse,
    load_fixture,
)


class TestDecodeHeaders:
    def test_set_cookie_kept_separate(self):
        hm = MockHeaderMap(
            [
                ("Server", "cloudflare"),
                ("Set-Cookie", "a=1; path=/"),
                ("Set-Cookie", "b=2; Expires=Wed, 21 Oct 2037 07:28:00 GMT"),
            ]
        )
        headers, set_cookies = _decode_headers(hm)
        assert headers == {"server": "cloudflare"}
        assert set_cookies == [
            "a=1; path=/",
            "b=2; Expires=Wed, 21 Oct 2037 07:28:00 GMT",
        ]

    def test_repeated_headers_joined(self):
        hm = MockHeaderMap([("Vary", "Accept"), ("Vary", "Cookie")])
        headers, _ = _decode_headers(hm)
        assert headers["vary"] == "Accept, Cookie"


class TestToMethod:
    def test_known(self):
        assert _to_method("post") == Method.POST

    def test_unknown(self):
        with pytest.raises(ValueError):
            _to_method("BREW")

    def test_trace_unsupported(self):
        with pytest.raises(ValueError):
            _to_method("TRACE")


class TestRnetTransport:
    def test_send_converts_request_and_response(self):
        client = MockClient(
            [
                MockRnetResponse(
                    503,
                    [("Server", "cloudflare"), ("Set-Cookie", "__cfduid=d1")],
                    "challenge",
                )
            ]
        )
        transport = RnetTransport(client=client)
        req = Request(
            "POST",
            "https://example.com/x",
            headers={"User-Agent": "UA"},
            cookies={"s": "1"},
            body=b"a=1",
        )

        resp = transport.send(req)

        method, url, kwargs = client.request_log[0]
        assert method == Method.POST
        assert url == "https://example.com/x"
        assert kwargs["headers"] == {"User-Agent": "UA", "Cookie": "s=1"}
        assert kwargs["body"] == b"a=1"
        assert resp.status_code == 503
        assert resp.headers["server"] == "cloudflare"
        assert resp.set_cookies == ["__cfduid=d1"]
        assert resp.content == b"challenge"
        assert resp.url == "https://example.com/x"

    def test_get_sends_no_body(self):
        client = MockClient([MockRnetResponse(200)])
        RnetTransport(client=client).send(Request("GET", "https://example.com/"))
        assert "body" not in client.request_log[0][2]

    def test_connection_error(self):
        client = MockClient([ConnectionError("refused")])
        with pytest.raises(TransportError) as exc_info:
            RnetTransport(client=client).send(Request("GET", "https://a.com/"))
        assert exc_info.value.url == "https://a.com/"

    def test_body_read_error(self):
        client = MockClient([MockRnetResponse(200, body=OSError("gzip"))])
        with pytest.raises(BodyReadError) as exc_info:
            RnetTransport(client=client).send(Request("GET", "https://a.com/"))
        assert "gzip" in exc_info.value.reason

    def test_location_exposed(self):
        client = MockClient(
            [MockRnetResponse(302, {"Location": "/after"})]
        )
        resp = RnetTransport(client=client).send(Request("GET", "https://a.com/"))
        assert resp.location == "/after"


class TestBypassClient:
    def _client(self, responses, **kwargs):
        mock = MockClient(responses)
        client = BypassClient(transport=RnetTransport(client=mock), **kwargs)
        return client, mock

    def test_plain_response(self):
        client, mock = self._client([MockRnetResponse(200, body="hello")])
        resp = client.get("https://example.com/")
        assert resp.text == "hello"
        assert len(mock.request_log) == 1

    def test_default_headers_sent(self):
        client, mock = self._client([MockRnetResponse(200)])
        client.get("https://example.com/", headers={"Accept-Language": "de"})
        sent = mock.request_log[0][2]["headers"]
        assert sent["Accept"] == DEFAULT_HEADERS["Accept"]
        assert sent["Accept-Language"] == "de"

    @patch("cfpass._delay.time.sleep")
    def test_challenge_solved_transparently(self, _sleep):
        client, mock = self._client(
            [
                MockRnetResponse(
                    503,
                    [("Server", "cloudflare"), ("Set-Cookie", "__cfduid=d1")],
                    load_fixture("challenge_get.html"),
                ),
                MockRnetResponse(
                    302,
                    [("Set-Cookie", "cf_clearance=ok; path=/")],
                ),
                MockRnetResponse(200, body="the page"),
            ],
            engine_factory=EngineRecorder(GET_PAGE_ANSWER),
        )

        resp = client.get("https://example.com/file")

        assert resp.status_code == 200
        assert resp.text == "the page"
        assert resp.set_cookies == ["cf_clearance=ok; path=/"]
        assert len(mock.request_log) == 3
        _, submit_url, submit_kwargs = mock.request_log[1]
        assert submit_url.startswith("https://example.com/cdn-cgi/l/chk_jschl?")
        assert f"jschl_answer={GET_PAGE_ANSWER}" in submit_url
        assert submit_kwargs["headers"]["Referer"] == "https://example.com/file"
        _, retry_url, retry_kwargs = mock.request_log[2]
        assert retry_url == "https://example.com/file"
        assert retry_kwargs["headers"]["Cookie"] == (
            "__cfduid=d1; cf_clearance=ok"
        )

    def test_str_body_encoded(self):
        client, mock = self._client([MockRnetResponse(200)])
        client.post("https://example.com/", body="x=1")
        assert mock.request_log[0][2]["body"] == b"x=1"

    def test_dump_flags(self):
        client = BypassClient(transport=lambda r: None, dump=True, dump_body=True)
        assert client.dump.enabled is True
        assert client.dump.include_body is True

    def test_context_manager_closes_transport(self):
        class ClosingTransport:
            closed = False

            def __call__(self, request):
                raise AssertionError("not used")

            def close(self):
                self.closed = True

        transport = ClosingTransport()
        with BypassClient(transport=transport):
            pass
        assert transport.closed is True
