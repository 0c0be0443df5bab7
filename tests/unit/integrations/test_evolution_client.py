import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from clinicbot.integrations.evolution import EvolutionClient, EvolutionConnectionError, extract_instance_name


def _client(handler, simulate_typing=False):
    return EvolutionClient(
        base_url="http://evolution.test/",
        api_key="secret",
        timeout=5.0,
        simulate_typing=simulate_typing,
        transport=httpx.MockTransport(handler),
    )


class TestExtractInstanceName:
    def test_nested_shape(self):
        assert extract_instance_name({"instance": {"instanceName": "clinic"}}) == "clinic"

    def test_flat_shapes(self):
        assert extract_instance_name({"instanceName": "clinic"}) == "clinic"
        assert extract_instance_name({"name": "clinic"}) == "clinic"

    def test_missing_name(self):
        assert extract_instance_name({"status": "open"}) is None


class TestEvolutionClient:
    @pytest.mark.asyncio
    async def test_fetch_instances_sends_api_key(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["apikey"] = request.headers.get("apikey")
            return httpx.Response(200, json=[{"instance": {"instanceName": "a"}}, {"name": "b"}, {"other": 1}])

        async with _client(handler) as client:
            names = await client.fetch_instances()

        assert names == ["a", "b"]
        assert seen == {"path": "/instance/fetchInstances", "apikey": "secret"}

    @pytest.mark.asyncio
    async def test_fetch_instances_raises_on_http_error_status(self):
        async with _client(lambda request: httpx.Response(401, json={"error": "Unauthorized"})) as client:
            with pytest.raises(EvolutionConnectionError):
                await client.fetch_instances()

    @pytest.mark.asyncio
    async def test_fetch_instances_raises_on_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(EvolutionConnectionError):
                await client.fetch_instances()

    @pytest.mark.asyncio
    async def test_connection_state(self):
        def handler(request):
            if request.url.path == "/instance/connectionState/a":
                return httpx.Response(200, json={"instance": {"instanceName": "a", "state": "open"}})
            if request.url.path == "/instance/connectionState/b":
                return httpx.Response(200, json={"state": "close"})
            return httpx.Response(404)

        async with _client(handler) as client:
            assert await client.connection_state("a") == "open"
            assert await client.connection_state("b") == "close"
            assert await client.connection_state("c") is None
            assert await client.is_open("a") is True

    @pytest.mark.asyncio
    async def test_send_text_success(self):
        captured = {}

        def handler(request):
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(201, json={"key": {"id": "msg-1"}})

        async with _client(handler) as client:
            assert await client.send_text("clinic", "5511999990000", "Olá") is True

        assert captured["path"] == "/message/sendText/clinic"
        assert captured["body"] == {"number": "5511999990000", "text": "Olá"}

    @pytest.mark.asyncio
    async def test_send_text_returns_false_on_error_status(self):
        async with _client(lambda request: httpx.Response(500, text="internal error")) as client:
            assert await client.send_text("clinic", "5511999990000", "Olá") is False

    @pytest.mark.asyncio
    async def test_send_text_returns_false_on_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            assert await client.send_text("clinic", "5511999990000", "Olá") is False

    @pytest.mark.asyncio
    async def test_typing_simulation_sends_presence_first(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={})

        with patch("clinicbot.integrations.evolution.client.asyncio.sleep", new=AsyncMock()) as sleep:
            async with _client(handler, simulate_typing=True) as client:
                await client.send_text("clinic", "5511999990000", "x" * 100)

        assert paths == ["/chat/updatePresence/clinic", "/message/sendText/clinic"]
        sleep.assert_awaited_once_with(pytest.approx(1.8))

    @pytest.mark.asyncio
    async def test_presence_failure_does_not_block_send(self):
        def handler(request):
            if request.url.path.startswith("/chat/updatePresence"):
                raise httpx.ConnectError("boom", request=request)
            return httpx.Response(200, json={})

        with patch("clinicbot.integrations.evolution.client.asyncio.sleep", new=AsyncMock()):
            async with _client(handler, simulate_typing=True) as client:
                assert await client.send_text("clinic", "5511999990000", "Olá") is True

    def test_typing_delay_is_capped(self):
        assert EvolutionClient.typing_delay("") == 1.0
        assert EvolutionClient.typing_delay("x" * 1000) == 3.0
