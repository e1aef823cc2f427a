"""
Tests for domain models (data structures).
"""

import pytest

from domain.models import (
    Config,
    ConfigurationError,
    EnvelopeState,
    ExtractedMessage,
    Notification,
    NotificationResult,
)


class TestConfig:
    """Test Config dataclass."""

    def test_defaults(self, config):
        """Test default dialect, listener and API base."""
        assert config.parse_mode == 'MarkdownV2'
        assert config.verbose is False
        assert config.host == '0.0.0.0'
        assert config.port == 2525
        assert config.api_base == 'https://api.telegram.org'

    def test_validate_returns_config(self, config):
        """Test validate() returns the same instance when valid."""
        assert config.validate() is config

    def test_validate_missing_token(self):
        """Test empty token is rejected."""
        with pytest.raises(ConfigurationError, match="--token and --chatid"):
            Config(telegram_token='', telegram_chat_id='42').validate()

    def test_validate_missing_chat_id(self):
        """Test empty chat id is rejected."""
        with pytest.raises(ConfigurationError, match="--token and --chatid"):
            Config(telegram_token='abc', telegram_chat_id='').validate()

    def test_validate_unknown_parse_mode(self):
        """Test only MarkdownV2 and HTML are accepted."""
        with pytest.raises(ConfigurationError, match="Unsupported parse mode"):
            Config(telegram_token='abc', telegram_chat_id='42', parse_mode='Markdown').validate()

    def test_validate_invalid_port(self):
        """Test out-of-range port is rejected."""
        with pytest.raises(ConfigurationError, match="Invalid port"):
            Config(telegram_token='abc', telegram_chat_id='42', port=70000).validate()

    def test_send_message_url(self, config):
        """Test URL is templated with the bot token."""
        assert config.send_message_url == 'https://api.telegram.org/bot123456:TEST-TOKEN/sendMessage'

    def test_send_message_url_strips_trailing_slash(self):
        """Test custom API base with trailing slash."""
        config = Config(telegram_token='abc', telegram_chat_id='42', api_base='http://localhost:8081/')
        assert config.send_message_url == 'http://localhost:8081/botabc/sendMessage'

    def test_repr_hides_token(self, config):
        """Test token is not exposed in repr."""
        assert 'TEST-TOKEN' not in repr(config)
        assert '-1001234567890' in repr(config)

    def test_config_is_immutable(self, config):
        """Test configuration cannot be mutated after construction."""
        with pytest.raises(AttributeError):
            config.verbose = True


class TestEnvelopeState:
    """Test EnvelopeState ordering."""

    def test_states_are_ordered(self):
        assert EnvelopeState.INITIAL < EnvelopeState.SENDER_SET < EnvelopeState.RECIPIENT_SET


class TestExtractedMessage:
    """Test ExtractedMessage dataclass."""

    def test_has_body(self):
        assert ExtractedMessage(subject='s', body='text').has_body is True

    def test_empty_body(self):
        assert ExtractedMessage(subject='s', body='').has_body is False


class TestNotification:
    """Test Notification dataclass."""

    def test_to_payload(self):
        """Test sendMessage payload shape."""
        notification = Notification(text='hello', parse_mode='HTML')

        payload = notification.to_payload('42')

        assert payload == {'chat_id': '42', 'text': 'hello', 'parse_mode': 'HTML'}

    def test_notification_is_immutable(self):
        notification = Notification(text='hello', parse_mode='HTML')
        with pytest.raises(AttributeError):
            notification.text = 'changed'


class TestNotificationResult:
    """Test NotificationResult dataclass."""

    def test_success_result(self):
        result = NotificationResult(success=True, status_code=200)

        assert result.success is True
        assert result.error_message is None
        assert repr(result) == "NotificationResult(success=True, status=200)"

    def test_failure_result(self):
        result = NotificationResult(success=False, status_code=400, error_message="Bad Request")

        assert result.success is False
        assert "error=Bad Request" in repr(result)
