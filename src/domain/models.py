"""
Data models for the SMTP to Telegram bridge.

These type-safe data structures define clear contracts between components.
"""

from dataclasses import dataclass, asdict
from enum import IntEnum
from typing import Optional, Dict, Any

NO_SUBJECT = "[No Subject]"

PARSE_MODE_MARKDOWN = "MarkdownV2"
PARSE_MODE_HTML = "HTML"
SUPPORTED_PARSE_MODES = (PARSE_MODE_MARKDOWN, PARSE_MODE_HTML)


class ConfigurationError(Exception):
    """Raised when process configuration is invalid or missing."""
    pass


@dataclass(frozen=True)
class Config:
    """
    Process-wide configuration, read-only after startup.

    Attributes:
        telegram_token: Bot token used in the sendMessage URL
        telegram_chat_id: Destination chat identifier
        parse_mode: Output dialect, "MarkdownV2" or "HTML"
        verbose: Emit connection and delivery logs
        host: Listening interface
        port: Listening TCP port
        api_base: Telegram Bot API base URL
    """
    telegram_token: str
    telegram_chat_id: str
    parse_mode: str = PARSE_MODE_MARKDOWN
    verbose: bool = False
    host: str = "0.0.0.0"
    port: int = 2525
    api_base: str = "https://api.telegram.org"

    def validate(self) -> "Config":
        """
        Check required values.

        Returns:
            The same Config, for chaining

        Raises:
            ConfigurationError: If token or chat id is empty, or parse mode unknown
        """
        if not self.telegram_token or not self.telegram_chat_id:
            raise ConfigurationError("Required --token and --chatid")
        if self.parse_mode not in SUPPORTED_PARSE_MODES:
            raise ConfigurationError(
                f"Unsupported parse mode '{self.parse_mode}'. "
                f"Expected one of: {', '.join(SUPPORTED_PARSE_MODES)}"
            )
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port}")
        return self

    @property
    def send_message_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/bot{self.telegram_token}/sendMessage"

    def __repr__(self) -> str:
        # Keep the bot token out of logs
        return (
            f"Config(chat_id={self.telegram_chat_id}, parse_mode={self.parse_mode}, "
            f"verbose={self.verbose}, listen={self.host}:{self.port})"
        )


class EnvelopeState(IntEnum):
    """Envelope progress of an SMTP session, ordered."""
    INITIAL = 0
    SENDER_SET = 1
    RECIPIENT_SET = 2


@dataclass
class ExtractedMessage:
    """
    Subject and plain-text body taken from a DATA block.

    Attributes:
        subject: First Subject header, or "[No Subject]"
        body: Post-header lines joined by newlines, surrounding whitespace stripped
    """
    subject: str
    body: str

    @property
    def has_body(self) -> bool:
        return bool(self.body)


@dataclass(frozen=True)
class Notification:
    """
    Formatted outbound text plus its dialect tag.

    Attributes:
        text: Escaped message text, ready for the chat API
        parse_mode: Dialect the text was rendered in
    """
    text: str
    parse_mode: str

    def to_payload(self, chat_id: str) -> Dict[str, Any]:
        """
        Build the sendMessage JSON body.

        Args:
            chat_id: Destination chat identifier

        Returns:
            Dict with chat_id, text and parse_mode
        """
        payload = asdict(self)
        payload['chat_id'] = chat_id
        return payload


@dataclass
class NotificationResult:
    """
    Outcome of one delivery attempt.

    Delivery is fire-and-forget: this result is only ever logged, it never
    changes what the SMTP client is told.

    Attributes:
        success: Whether the chat API accepted the message
        status_code: HTTP status, when a response was received
        error_message: Error description (if delivery failed)
    """
    success: bool
    status_code: Optional[int] = None
    error_message: Optional[str] = None

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"NotificationResult(success=True, status={self.status_code})"
        else:
            return f"NotificationResult(success=False, status={self.status_code}, error={self.error_message})"
