"""Tests for Telegram notifications (no network: httpx mock transport)."""

import json

import httpx
import pytest

from stockcut.monitoring.telegram_notifier import (
    format_error,
    format_final_summary,
    format_progress,
    format_run_complete,
    send_telegram,
)


@pytest.fixture(autouse=True)
def no_telegram_env(monkeypatch):
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.delenv("TELEGRAM_CHAT_ID", raising=False)


class TestSendTelegram:
    @pytest.mark.asyncio
    async def test_without_token_does_nothing(self):
        assert await send_telegram("hello") is False

    @pytest.mark.asyncio
    async def test_without_chat_id_does_nothing(self):
        assert await send_telegram("hello", token="abc") is False

    @pytest.mark.asyncio
    async def test_posts_message(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        ok = await send_telegram("hello", chat_id="42", token="abc", transport=httpx.MockTransport(handler))
        assert ok is True
        assert seen[0].url.path == "/botabc/sendMessage"
        assert json.loads(seen[0].content) == {"chat_id": "42", "text": "hello"}

    @pytest.mark.asyncio
    async def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "envtoken")
        monkeypatch.setenv("TELEGRAM_CHAT_ID", "7")
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))
        assert await send_telegram("hello", transport=transport) is True

    @pytest.mark.asyncio
    async def test_rejected_message(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"ok": False}))
        assert await send_telegram("hello", chat_id="42", token="abc", transport=transport) is False

    @pytest.mark.asyncio
    async def test_network_error_is_reported_as_false(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        transport = httpx.MockTransport(handler)
        assert await send_telegram("hello", chat_id="42", token="abc", transport=transport) is False

    @pytest.mark.asyncio
    async def test_non_json_response(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway"))
        assert await send_telegram("hello", chat_id="42", token="abc", transport=transport) is False


class TestFormatters:
    def test_run_complete(self):
        text = format_run_complete("two_stock", 9, 93.44, 0.87125)
        assert "two_stock" in text
        assert "Utilization: 93.4%" in text
        assert "Fitness: 0.8712" in text or "Fitness: 0.8713" in text

    def test_progress_without_problems(self):
        assert "(100%)" in format_progress(0, 0, 0.0)

    def test_error_without_context(self):
        assert format_error("ValueError", "bad") == "Error: ValueError\nbad"

    def test_final_summary(self):
        text = format_final_summary(2, 14, 91.25, 30, 1)
        assert "Runtime: 0.5 minutes" in text
        assert text.endswith("Errors: 1")
