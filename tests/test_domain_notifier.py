"""
Tests for the Notifier (format + deliver, never raise).
"""

import logging
import pytest
from unittest.mock import Mock, patch, MagicMock

from domain.models import ExtractedMessage, Notification, NotificationResult
from domain.notifier import Notifier
from integrations import telegram


class TestNotify:
    """Test Notifier.notify()."""

    def test_notify_success(self, config, sample_message):
        """Test formatted notification is handed to the transport."""
        send = Mock(return_value=200)
        notifier = Notifier(config, send=send)

        result = notifier.notify(sample_message)

        assert result == NotificationResult(success=True, status_code=200)
        send.assert_called_once()
        sent_config, notification = send.call_args.args
        assert sent_config is config
        assert isinstance(notification, Notification)
        assert notification.parse_mode == 'MarkdownV2'
        assert notification.text.startswith("\U0001F4E8 *Backup finished*\n**> line1")

    def test_notify_html_dialect(self, html_config):
        send = Mock(return_value=200)
        notifier = Notifier(html_config, send=send)

        notifier.notify(ExtractedMessage(subject='<b>', body='body'))

        notification = send.call_args.args[1]
        assert notification.parse_mode == 'HTML'
        assert '&lt;b&gt;' in notification.text
        assert '<b>&lt;b&gt;</b>' in notification.text

    def test_notify_delivery_error_swallowed(self, config, sample_message):
        """Test Telegram rejection becomes a failed result."""
        send = Mock(side_effect=telegram.TelegramDeliveryError("HTTP 400: Bad Request", status_code=400))
        notifier = Notifier(config, send=send)

        result = notifier.notify(sample_message)

        assert result.success is False
        assert result.status_code == 400
        assert "Bad Request" in result.error_message

    def test_notify_unexpected_error_swallowed(self, config, sample_message):
        """Test any other exception is also contained."""
        notifier = Notifier(config, send=Mock(side_effect=RuntimeError("boom")))

        result = notifier.notify(sample_message)

        assert result.success is False
        assert result.status_code is None
        assert result.error_message == "boom"

    def test_notify_failure_logged_as_warning(self, config, sample_message, caplog):
        notifier = Notifier(
            config,
            send=Mock(side_effect=telegram.TelegramDeliveryError("HTTP 403: Forbidden", status_code=403))
        )

        with caplog.at_level(logging.INFO, logger='domain.notifier'):
            notifier.notify(sample_message)

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Forbidden" in warnings[0].getMessage()

    @patch('integrations.telegram.http_session')
    def test_default_transport_is_telegram(self, mock_session, config, sample_message):
        """Test the default transport posts through the shared session."""
        response = MagicMock()
        response.status_code = 200
        mock_session.post.return_value = response

        result = Notifier(config).notify(sample_message)

        assert result.success is True
        mock_session.post.assert_called_once()
