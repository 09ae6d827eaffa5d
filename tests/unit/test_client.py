"""Tests for caller-side transport selection, fallback and sessions."""

import json

import httpx
import pytest
from websockets.protocol import State

from db_studio.assistant.client import (
    HTTP,
    STREAM,
    AssistantClient,
    AssistantSession,
    WebSocketChannel,
)
from db_studio.assistant.gateway import UNAVAILABLE_MESSAGE
from db_studio.errors import TransportError
from db_studio.models.assistant import TurnState
from tests.fakes import FakeChannel


def _http_client(reply=None, status_code=200, requests=None):
    """AsyncClient whose every POST is answered by ``reply``."""
    reply = reply if reply is not None else {"message": "via http", "sqlQuery": "SELECT 2"}

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, json=reply)

    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://studio"
    )


def _stream_reply(message="via stream", sql="SELECT 1"):
    return {"type": "ai_response", "data": {"message": message, "sqlQuery": sql}}


class TestTransportSelection:
    """Streamed channel first, HTTP when it is closed or fails."""

    @pytest.mark.asyncio
    async def test_open_channel_is_preferred(self):
        requests = []
        channel = FakeChannel(replies=[_stream_reply()])
        async with _http_client(requests=requests) as http:
            client = AssistantClient(http, channel)
            response = await client.generate("users", "users(id)")

        assert response.message == "via stream"
        assert client.last_transport == STREAM
        assert channel.sent == [
            {"type": "ai_chat", "content": "users", "tableSchema": "users(id)"}
        ]
        assert requests == []

    @pytest.mark.asyncio
    async def test_closed_channel_uses_http(self):
        requests = []
        channel = FakeChannel(is_open=False)
        async with _http_client(requests=requests) as http:
            client = AssistantClient(http, channel)
            response = await client.optimize("SELECT * FROM users")

        assert response.message == "via http"
        assert client.last_transport == HTTP
        assert channel.sent == []
        assert requests[0].url.path == "/api/ai/optimize"
        assert json.loads(requests[0].content) == {"sqlQuery": "SELECT * FROM users"}

    @pytest.mark.asyncio
    async def test_no_channel_uses_http(self):
        requests = []
        async with _http_client(requests=requests) as http:
            client = AssistantClient(http, api_prefix="/v1/")
            await client.generate("count posts", "posts(id)")

        assert requests[0].url.path == "/v1/ai/generate"
        assert json.loads(requests[0].content) == {
            "prompt": "count posts",
            "tableSchema": "posts(id)",
        }

    @pytest.mark.asyncio
    async def test_stream_failure_falls_back_to_http(self):
        channel = FakeChannel(fail=True)
        async with _http_client() as http:
            client = AssistantClient(http, channel)
            response = await client.explain("SELECT 1")

        assert response.message == "via http"
        assert client.last_transport == HTTP
        assert len(channel.sent) == 1
        assert not channel.is_open

    @pytest.mark.asyncio
    async def test_error_frame_falls_back_to_http(self):
        channel = FakeChannel(
            replies=[{"type": "error", "message": "Failed to process message"}]
        )
        async with _http_client() as http:
            client = AssistantClient(http, channel)
            response = await client.generate("hi")

        assert response.message == "via http"
        assert client.last_transport == HTTP

    @pytest.mark.asyncio
    async def test_transports_can_mix_within_a_conversation(self):
        channel = FakeChannel(replies=[_stream_reply()], fail=False)
        async with _http_client() as http:
            client = AssistantClient(http, channel)
            await client.generate("first")
            assert client.last_transport == STREAM

            channel.fail = True
            await client.generate("second")
            assert client.last_transport == HTTP

            await client.generate("third")
            assert client.last_transport == HTTP
        assert len(channel.sent) == 2

    @pytest.mark.asyncio
    async def test_unknown_request_type(self):
        async with _http_client() as http:
            with pytest.raises(ValueError):
                await AssistantClient(http).request("ai_translate", "x")


class TestDegradation:
    @pytest.mark.asyncio
    async def test_both_transports_down(self):
        async with _http_client(status_code=500) as http:
            client = AssistantClient(http, FakeChannel(fail=True))
            response = await client.generate("hi")

        assert response.message == UNAVAILABLE_MESSAGE
        assert response.sql_query is None

    @pytest.mark.asyncio
    async def test_request_raises_when_http_fails(self):
        async with _http_client(status_code=503) as http:
            with pytest.raises(TransportError):
                await AssistantClient(http).request("ai_chat", "hi")


class TestSession:
    """Session-local conversation turns."""

    @pytest.mark.asyncio
    async def test_turns_are_recorded(self):
        channel = FakeChannel(replies=[_stream_reply(), _stream_reply("tuned")])
        async with _http_client() as http:
            session = AssistantSession(AssistantClient(http, channel))
            assert session.state is TurnState.IDLE

            await session.ask("all users")
            await session.optimize("SELECT * FROM users")

        assert session.state is TurnState.COMPLETED
        assert [turn.role for turn in session.turns] == [
            "user",
            "assistant",
            "user",
            "assistant",
        ]
        assert session.turns[0].text == "all users"
        assert session.turns[1].sql_query == "SELECT 1"
        assert session.turns[2].text == "Optimize this query:\nSELECT * FROM users"
        assert session.turns[3].text == "tuned"

    @pytest.mark.asyncio
    async def test_failed_turn(self):
        async with _http_client(status_code=500) as http:
            session = AssistantSession(AssistantClient(http))
            response = await session.explain("SELECT 1")

        assert session.state is TurnState.FAILED
        assert response.message == UNAVAILABLE_MESSAGE
        assert session.turns[-1].text == UNAVAILABLE_MESSAGE

    @pytest.mark.asyncio
    async def test_one_turn_in_flight(self):
        async with _http_client() as http:
            session = AssistantSession(AssistantClient(http))
            session.state = TurnState.SENT
            with pytest.raises(RuntimeError):
                await session.ask("second")

    @pytest.mark.asyncio
    async def test_clear(self):
        async with _http_client() as http:
            session = AssistantSession(AssistantClient(http))
            await session.ask("hi")
            session.clear()
        assert session.turns == []
        assert session.state is TurnState.IDLE


class TestWebSocketChannel:
    def test_closed_until_opened(self):
        assert not WebSocketChannel("ws://localhost:1/ws").is_open

    @pytest.mark.asyncio
    async def test_request_without_open(self):
        with pytest.raises(TransportError):
            await WebSocketChannel("ws://localhost:1/ws").request({"type": "ai_chat"})

    @pytest.mark.asyncio
    async def test_open_failure(self):
        channel = WebSocketChannel("ws://127.0.0.1:1/ws")
        with pytest.raises(TransportError):
            await channel.open()
        assert not channel.is_open


class _ScriptedConnection:
    """Open client connection that answers every send with ``raw``."""

    state = State.OPEN

    def __init__(self, raw):
        self.raw = raw

    async def send(self, data):
        pass

    async def recv(self):
        return self.raw


class TestWebSocketChannelReplies:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["[1, 2]", "not json"])
    async def test_bad_reply_marks_unhealthy(self, raw):
        channel = WebSocketChannel("ws://studio/ws")
        channel._connection = _ScriptedConnection(raw)
        channel.healthy = True
        assert channel.is_open

        with pytest.raises(TransportError):
            await channel.request({"type": "ai_chat", "content": "hi"})
        assert not channel.is_open

    @pytest.mark.asyncio
    async def test_unhealthy_channel_is_skipped(self):
        channel = WebSocketChannel("ws://studio/ws")
        channel._connection = _ScriptedConnection("[1, 2]")
        channel.healthy = True
        async with _http_client() as http:
            client = AssistantClient(http, channel)
            await client.generate("first")
            assert client.last_transport == HTTP
            await client.generate("second")
            assert client.last_transport == HTTP
        assert not channel.healthy
