"""Tests for geodata.transport."""

import json
import time

import httpx
import pytest

from geodata.client import DataClient
from geodata.exceptions import ServerError, TransportError
from geodata.transport import HttpxTransport, MockTransport, TransportRequest


class TestHttpxTransport:
    """Tests for HttpxTransport on top of httpx.MockTransport."""

    def test_sends_form_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers["Content-Type"]
            seen["body"] = request.content
            return httpx.Response(200, text='{"data": 1}')

        transport = HttpxTransport(http_transport=httpx.MockTransport(handler))
        body = transport.send(TransportRequest(
            method="POST",
            url="https://api.example.org/api/value",
            body="json=1&json_format=v2"
        ))

        assert body == '{"data": 1}'
        assert seen == {
            "method": "POST",
            "url": "https://api.example.org/api/value",
            "content_type": "application/x-www-form-urlencoded",
            "body": b"json=1&json_format=v2",
        }
        transport.close()

    def test_relative_url_resolved_against_origin(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(200, text='{"data": null}')

        transport = HttpxTransport(origin="https://example.org/", http_transport=httpx.MockTransport(handler))
        transport.send(TransportRequest(method="GET", url="/api/algorithms"))

        assert seen["url"] == "https://example.org/api/algorithms"

    def test_error_status_returns_body(self):
        def handler(request):
            return httpx.Response(400, text='{"error": {"message": "bad request"}}')

        transport = HttpxTransport(http_transport=httpx.MockTransport(handler))
        body = transport.send(TransportRequest(method="POST", url="https://x.org/api/info"))

        assert json.loads(body) == {"error": {"message": "bad request"}}

    def test_timeout_becomes_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        transport = HttpxTransport(http_transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="timed out after 250ms"):
            transport.send(TransportRequest(method="POST", url="https://x.org/api/info", timeout_ms=250))

    def test_connection_error_becomes_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        transport = HttpxTransport(http_transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="refused"):
            transport.send(TransportRequest(method="POST", url="https://x.org/api/info"))

    def test_timeout_applied_per_request(self):
        seen = {}

        def handler(request):
            seen["timeout"] = request.extensions.get("timeout")
            return httpx.Response(200, text='{"data": 1}')

        transport = HttpxTransport(http_transport=httpx.MockTransport(handler))
        transport.send(TransportRequest(method="GET", url="https://x.org/a", timeout_ms=1500))
        assert seen["timeout"]["read"] == 1.5

        transport.send(TransportRequest(method="GET", url="https://x.org/a", timeout_ms=0))
        assert seen["timeout"]["read"] is None

    def test_slow_body_exceeds_overall_deadline(self):
        def trickle():
            for _ in range(20):
                time.sleep(0.05)
                yield b"x"

        transport = HttpxTransport(http_transport=httpx.MockTransport(
            lambda request: httpx.Response(200, content=trickle())
        ))

        started = time.monotonic()
        with pytest.raises(TransportError, match="timed out after 200ms"):
            transport.send(TransportRequest(method="POST", url="https://x.org/api/value", timeout_ms=200))
        assert time.monotonic() - started < 0.9

    def test_slow_body_without_timeout_completes(self):
        def trickle():
            for _ in range(3):
                time.sleep(0.01)
                yield b"{}"

        transport = HttpxTransport(http_transport=httpx.MockTransport(
            lambda request: httpx.Response(200, content=trickle())
        ))
        assert transport.send(TransportRequest(method="GET", url="https://x.org/a")) == "{}{}{}"

    def test_send_after_close_raises(self):
        transport = HttpxTransport(http_transport=httpx.MockTransport(lambda r: httpx.Response(200, text="{}")))
        first = transport._get_client()
        transport.close()

        assert first.is_closed
        assert transport.closed
        with pytest.raises(TransportError, match="closed"):
            transport.send(TransportRequest(method="GET", url="https://x.org/a"))
        assert transport._client is first

    def test_data_client_timeout_covers_body(self, settings):
        def trickle():
            for _ in range(20):
                time.sleep(0.05)
                yield b" "

        transport = HttpxTransport(
            origin="https://example.org",
            http_transport=httpx.MockTransport(lambda request: httpx.Response(200, content=trickle()))
        )
        with DataClient(transport=transport, settings=settings) as client:
            client.set_timeout(150)
            with pytest.raises(TransportError, match="timed out after 150ms"):
                client.get_info("img")

            response = client.get_info_async("img").result(timeout=5)
            assert response.error.startswith("Request timed out after 150ms")

    def test_end_to_end_with_data_client(self, settings):
        def handler(request):
            if request.url.path == "/api/info":
                return httpx.Response(200, text='{"data": {"id": "img"}}')
            return httpx.Response(500, text='{"error": {"message": "nope"}}')

        transport = HttpxTransport(origin="https://example.org", http_transport=httpx.MockTransport(handler))
        with DataClient(transport=transport, settings=settings) as client:
            assert client.get_info("img") == {"id": "img"}
            with pytest.raises(ServerError, match="nope"):
                client.get_value({"json": "1"})


class TestMockTransport:
    """Tests for MockTransport."""

    def test_literal_response(self):
        mock = MockTransport({"/api/info": '{"data": 1}'})
        assert mock.send(TransportRequest(method="POST", url="/api/info")) == '{"data": 1}'

    def test_callable_response(self):
        mock = MockTransport({"/api/info": lambda request: request.body})
        assert mock.send(TransportRequest(method="POST", url="/api/info", body="id=x")) == "id=x"

    def test_unknown_url_echoes_request(self):
        mock = MockTransport()
        body = mock.send(TransportRequest(method="GET", url="/api/other", body=""))
        assert json.loads(body) == {"data": {"url": "/api/other", "method": "GET", "data": ""}}

    def test_records_requests(self):
        mock = MockTransport()
        request = TransportRequest(method="POST", url="/api/x", body="a=1")
        mock.send(request)
        assert mock.requests == [request]
