"""Tests for the httpx backend transport."""

import httpx
import pytest

from paratransit.config import Settings
from paratransit.errors import BookingError, ErrorCategory
from paratransit.transport import Transport
from paratransit.transport.http import HttpTransport

SETTINGS = Settings(
    api_url="https://backend.test/PassInfoServer",
    api_async_url="https://backend.test/PassInfoServerAsync",
)


def _transport(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpTransport(SETTINGS, client)


class TestTransportABC:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            Transport()


class TestHttpTransport:
    async def test_posts_xml_with_session_cookie(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["method"] = request.method
            seen["content_type"] = request.headers["content-type"]
            seen["cookie"] = request.headers["cookie"]
            seen["body"] = request.content.decode("utf-8")
            return httpx.Response(200, text="<Result>RESULTOK</Result>")

        text = await _transport(handler).post("<Envelope/>", "JSESSIONID=abc123")

        assert text == "<Result>RESULTOK</Result>"
        assert seen["url"] == "https://backend.test/PassInfoServer"
        assert seen["method"] == "POST"
        assert seen["content_type"] == "text/xml;charset=UTF-8"
        assert seen["cookie"] == "JSESSIONID=abc123"
        assert seen["body"] == "<Envelope/>"

    async def test_async_endpoint(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, text="")

        await _transport(handler).post("<x/>", "s", use_async_endpoint=True)
        assert urls == ["https://backend.test/PassInfoServerAsync"]

    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_session_is_auth_failure(self, status):
        with pytest.raises(BookingError) as exc_info:
            await _transport(lambda r: httpx.Response(status)).post("<x/>", "s")
        assert exc_info.value.category == ErrorCategory.AUTH_FAILURE

    async def test_server_error_is_recoverable_network_error(self):
        with pytest.raises(BookingError) as exc_info:
            await _transport(lambda r: httpx.Response(500, text="boom")).post("<x/>", "s")
        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR
        assert exc_info.value.recoverable
        assert "500" in exc_info.value.message

    async def test_timeout_is_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(BookingError) as exc_info:
            await _transport(handler).post("<x/>", "s")
        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR

    async def test_connection_error_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BookingError) as exc_info:
            await _transport(handler).post("<x/>", "s")
        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR

    async def test_owned_client_closed(self):
        transport = HttpTransport(SETTINGS)
        client = transport._get_client()
        await transport.aclose()
        assert client.is_closed
