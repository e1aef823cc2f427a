"""
Notification pipeline - turns an extracted message into a chat message.

1. Format subject and body for the configured dialect
2. Send the result to Telegram
3. Return a NotificationResult (success or failure)

Delivery is fire-and-forget. All errors are caught and returned as
NotificationResult with success=False; nothing propagates to the SMTP
session, which always reports the message as accepted.
"""

import logging
from typing import Callable, Optional

from .models import Config, ExtractedMessage, Notification, NotificationResult
from services import formatting
from integrations import telegram

logger = logging.getLogger(__name__)

# Characters of body shown in log previews
PREVIEW_LENGTH = 200


class Notifier:
    """
    Formats extracted messages and delivers them to one Telegram chat.

    A single instance is shared by every SMTP session; it holds no mutable
    state of its own.
    """

    def __init__(
        self,
        config: Config,
        send: Optional[Callable[[Config, Notification], int]] = None
    ):
        """
        Initialize notifier.

        Args:
            config: Process configuration
            send: Transport callable, defaults to telegram.send_message
        """
        self.config = config
        self.send = send or telegram.send_message

    def notify(self, message: ExtractedMessage) -> NotificationResult:
        """
        Format and deliver one message.

        Args:
            message: Extracted subject and body

        Returns:
            NotificationResult with success=True or success=False (errors logged)
        """
        self._log_message(message)

        try:
            notification = formatting.build_notification(message, self.config.parse_mode)
            status_code = self.send(self.config, notification)
            logger.info("Telegram message sent")
            return NotificationResult(success=True, status_code=status_code)

        except telegram.TelegramDeliveryError as e:
            logger.warning(f"Telegram error: {e}")
            return NotificationResult(
                success=False,
                status_code=e.status_code,
                error_message=str(e)
            )

        except Exception as e:
            logger.warning(f"Unexpected notification failure: {e}", exc_info=True)
            return NotificationResult(success=False, error_message=str(e))

    def _log_message(self, message: ExtractedMessage) -> None:
        """Log subject and a body preview."""
        logger.info(f"Subject: {message.subject}")
        if message.has_body:
            body = message.body
            preview = body[:PREVIEW_LENGTH] + ('...' if len(body) > PREVIEW_LENGTH else '')
            logger.info(f"Body preview:\n{preview}")
