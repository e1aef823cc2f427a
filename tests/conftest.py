"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.models import Config, ExtractedMessage, PARSE_MODE_HTML


@pytest.fixture
def config():
    """Default MarkdownV2 configuration."""
    return Config(
        telegram_token='123456:TEST-TOKEN',
        telegram_chat_id='-1001234567890'
    )


@pytest.fixture
def html_config(config):
    """Configuration using the HTML dialect."""
    return Config(
        telegram_token=config.telegram_token,
        telegram_chat_id=config.telegram_chat_id,
        parse_mode=PARSE_MODE_HTML
    )


@pytest.fixture
def sample_message():
    """Extracted message with a four-line body."""
    return ExtractedMessage(
        subject='Backup finished',
        body='line1\nline2\nline3\nline4'
    )
