"""Tests for the webhook chat backend."""

import json
from unittest.mock import patch

import httpx
import pytest

from aichat_workspace.backends import get_backend
from aichat_workspace.backends.webhook import WebhookBackend, extract_reply_text


def make_backend(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookBackend(url="http://hooks.test/webhook/chat", client=client)


class TestExtractReplyText:
    def test_output_key(self):
        assert extract_reply_text({"output": "hi"}) == "hi"

    def test_key_precedence(self):
        assert extract_reply_text({"message": "m", "text": "t"}) == "t"

    def test_bare_string(self):
        assert extract_reply_text("plain") == "plain"

    def test_unknown_shape_reserialized(self):
        assert json.loads(extract_reply_text({"foo": 1})) == {"foo": 1}

    def test_empty_value_skipped(self):
        assert extract_reply_text({"output": "", "response": "r"}) == "r"


class TestWebhookBackend:
    @pytest.mark.asyncio
    async def test_posts_chat_input_and_session(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"output": "Hello!"})

        backend = make_backend(handler)
        reply = await backend.send("Hi there", "session_1")
        assert reply.ok
        assert reply.text == "Hello!"
        assert seen["body"] == {"chatInput": "Hi there", "sessionId": "session_1"}
        assert seen["url"] == "http://hooks.test/webhook/chat"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        backend = make_backend(lambda request: httpx.Response(500))
        reply = await backend.send("Hi", "s")
        assert not reply.ok
        assert reply.error_message == "webhook error: 500 Internal Server Error"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend = make_backend(handler)
        reply = await backend.send("Hi", "s")
        assert not reply.ok
        assert "connection refused" in reply.error_message

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        backend = make_backend(lambda request: httpx.Response(200, text="just text"))
        reply = await backend.send("Hi", "s")
        assert reply.text == "just text"

    @pytest.mark.asyncio
    async def test_check_connection(self):
        backend = make_backend(lambda request: httpx.Response(200, json={"output": "ok"}))
        assert await backend.check_connection("s") is True

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        backend = make_backend(lambda request: httpx.Response(200, json={"output": "ok"}))
        await backend.aclose()
        reply = await backend.send("Hi", "s")
        assert reply.ok


class TestRegistry:
    def test_webhook_uses_environment(self):
        with patch.dict("os.environ", {"AICHAT_WEBHOOK_URL": "http://env.test/hook"}):
            backend = get_backend("webhook")
        assert isinstance(backend, WebhookBackend)
        assert backend.url == "http://env.test/hook"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            get_backend("carrier-pigeon")
