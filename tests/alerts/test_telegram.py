"""Tests for Telegram alerts."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from chainflow.alerts.telegram import NoopAlertSink, TelegramAlertSink

SEND_URL = "https://api.telegram.org/bottest_token_123/sendMessage"


class TestNoopAlertSink:
    @pytest.mark.asyncio
    async def test_noop_push(self):
        """Noop sink just logs messages."""
        await NoopAlertSink().push("Swap executed")


class TestTelegramAlertSink:
    """Test Telegram alert sink functionality."""

    @pytest.fixture
    def alert_sink(self):
        """Create a test alert sink."""
        return TelegramAlertSink(
            bot_token="test_token_123",
            admin_user_ids=[12345, 67890],
            session=AsyncMock(spec=httpx.AsyncClient),
        )

    def test_initialization(self, alert_sink):
        assert alert_sink.admin_user_ids == [12345, 67890]
        assert alert_sink.base_url == "https://api.telegram.org/bottest_token_123"

    @pytest.mark.asyncio
    async def test_push_message_success(self, alert_sink):
        """Each admin gets the message."""
        mock_response = AsyncMock()
        mock_response.json = MagicMock(return_value={"ok": True, "result": {"message_id": 1}})
        mock_response.raise_for_status = MagicMock()
        alert_sink.session.post.return_value = mock_response

        await alert_sink.push("Deposit executed: https://sepolia.etherscan.io/tx/0xabc")

        assert alert_sink.session.post.call_count == 2
        first_call = alert_sink.session.post.call_args_list[0]
        assert first_call[0][0] == SEND_URL
        assert first_call[1]["json"]["chat_id"] == 12345
        assert first_call[1]["json"]["text"].startswith("Deposit executed")
        second_call = alert_sink.session.post.call_args_list[1]
        assert second_call[1]["json"]["chat_id"] == 67890

    @pytest.mark.asyncio
    async def test_push_message_no_admins(self):
        alert_sink = TelegramAlertSink(
            bot_token="test_token", admin_user_ids=[], session=AsyncMock()
        )

        await alert_sink.push("Test message")

        alert_sink.session.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error_is_not_raised(self, alert_sink):
        """A Telegram error for one admin does not stop the others."""
        error_response = AsyncMock()
        error_response.json = MagicMock(return_value={"ok": False, "description": "chat not found"})
        error_response.raise_for_status = MagicMock()
        ok_response = AsyncMock()
        ok_response.json = MagicMock(return_value={"ok": True})
        ok_response.raise_for_status = MagicMock()
        alert_sink.session.post.side_effect = [error_response, ok_response]

        await alert_sink.push("Pipeline failed")

        assert alert_sink.session.post.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_is_not_raised(self):
        route = respx.post(SEND_URL).mock(return_value=httpx.Response(500))

        async with TelegramAlertSink(
            bot_token="test_token_123", admin_user_ids=[12345]
        ) as alert_sink:
            await alert_sink.push("Swap executed")

        assert route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_real_http_round_trip(self):
        route = respx.post(SEND_URL).mock(
            return_value=httpx.Response(200, json={"ok": True, "result": {}})
        )

        async with TelegramAlertSink(
            bot_token="test_token_123", admin_user_ids=[12345]
        ) as alert_sink:
            await alert_sink.push("Swap executed")

        assert route.call_count == 1
        assert b'"chat_id":12345' in route.calls[0].request.content.replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_close(self, alert_sink):
        await alert_sink.close()
        alert_sink.session.aclose.assert_awaited_once()
