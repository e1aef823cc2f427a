"""
Telegram Bot API Integration Module

This module sends formatted notifications to a Telegram chat through the
Bot API sendMessage method, using one pooled HTTP session shared by every
SMTP connection.

Usage:
    from integrations import telegram

    telegram.send_message(config, notification)
"""

import logging
import time
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from domain.models import Config, Notification

# Configure logging
logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class TelegramDeliveryError(Exception):
    """Raised when Telegram does not accept a notification."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# ============================================================================
# Module-Level HTTP Session
# ============================================================================

# Connection pool size per host
POOL_MAXSIZE = 10

# (connect, read) timeouts in seconds
REQUEST_TIMEOUT = (10, 30)


def _initialize_http_session() -> requests.Session:
    """
    Create the pooled HTTP session used for every notification.

    Configured with NO retries: a failed notification is dropped.

    Returns:
        requests.Session: Session with a pooled HTTPS adapter
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=POOL_MAXSIZE,
        max_retries=0
    )
    session.mount('https://', adapter)
    session.mount('http://', adapter)

    logger.debug(
        f"Telegram HTTP session initialized: pool_maxsize={POOL_MAXSIZE}, "
        f"timeout={REQUEST_TIMEOUT}, max_retries=0"
    )
    return session


# Initialize at module import time. requests does not promise Session is
# thread-safe; sharing it across connection threads is safe here because
# only post() is called and no cookie or auth state is ever changed.
http_session = _initialize_http_session()


# ============================================================================
# Core Delivery Functions
# ============================================================================

def _error_description(response: requests.Response) -> str:
    """Pull Telegram's error description out of a failed response."""
    try:
        return response.json().get('description', response.text)
    except ValueError:
        return response.text[:200]


def send_message(config: Config, notification: Notification) -> int:
    """
    POST a notification to the configured chat.

    Args:
        config: Process configuration (token, chat id, API base)
        notification: Formatted text and parse mode

    Returns:
        int: HTTP status code of the accepted request

    Raises:
        TelegramDeliveryError: On a non-2xx response or any transport error
    """
    start_time = time.time()
    payload = notification.to_payload(config.telegram_chat_id)

    logger.info(
        f"Sending Telegram message: chat_id={config.telegram_chat_id}, "
        f"parse_mode={notification.parse_mode}, text_length={len(notification.text)}"
    )

    try:
        response = http_session.post(
            config.send_message_url,
            json=payload,
            timeout=REQUEST_TIMEOUT
        )
    except requests.RequestException as e:
        # Exception text can include the URL, which carries the token
        raise TelegramDeliveryError(
            f"Request to Telegram failed: {type(e).__name__}"
        ) from e

    if not 200 <= response.status_code < 300:
        raise TelegramDeliveryError(
            f"Telegram rejected message: HTTP {response.status_code}: "
            f"{_error_description(response)}",
            status_code=response.status_code
        )

    execution_time = time.time() - start_time
    logger.info(
        f"Telegram message sent: status={response.status_code}, "
        f"execution_time={execution_time:.2f}s"
    )
    return response.status_code
