"""
Notification text formatting for the Telegram Bot API.

Two dialects are supported:
1. MarkdownV2 (default) - escaped subject in bold, body as an expandable
   block quote
2. HTML - escaped subject in <b>, body in <blockquote expandable>

Each escape function is applied exactly once per message. Re-escaping
already escaped text is not supported.
"""

from typing import List

from domain.models import ExtractedMessage, Notification, PARSE_MODE_HTML

MESSAGE_ICON = "\U0001F4E8"  # incoming envelope

# Characters Telegram MarkdownV2 treats as markup
MARKDOWN_RESERVED = "()[]{}<>`#+-=|.!*_\\"

HTML_ESCAPES = {
    '<': '&lt;',
    '>': '&gt;',
    '&': '&amp;',
    '"': '&quot;',
}

# Lines shown before Telegram collapses the quote
EXPANDABLE_VISIBLE_LINES = 3


def escape_markdown(text: str) -> str:
    """
    Escape MarkdownV2 reserved characters with a backslash.

    Example:
        >>> escape_markdown("a(b)c")
        'a\\\\(b\\\\)c'
    """
    return ''.join('\\' + c if c in MARKDOWN_RESERVED else c for c in text)


def html_escape(text: str) -> str:
    """Escape <, >, & and double quotes for Telegram HTML mode."""
    return ''.join(HTML_ESCAPES.get(c, c) for c in text)


def format_expandable_quote(text: str) -> str:
    """
    Render text as a MarkdownV2 expandable block quote.

    The first line opens the quote in bold, later lines are plain quote
    lines. With more than three lines an empty quote line follows the
    third one, which makes Telegram collapse the rest behind an expand
    control. The last line closes the spoiler with "||".

    Args:
        text: Plain body text (not yet escaped)

    Returns:
        str: Quote block, or "" for an empty body
    """
    if not text:
        return ""

    lines: List[str] = []
    for i, line in enumerate(text.split('\n')):
        escaped = escape_markdown(line)
        if i == 0:
            lines.append(f"**> {escaped}")
        else:
            lines.append(f"> {escaped}")

    if len(lines) > EXPANDABLE_VISIBLE_LINES:
        lines.insert(EXPANDABLE_VISIBLE_LINES, "> ")

    lines[-1] += "||"
    return '\n'.join(lines)


def format_message(message: ExtractedMessage, parse_mode: str) -> str:
    """
    Build the outbound text for the configured dialect.

    Args:
        message: Extracted subject and body
        parse_mode: "HTML" selects HTML, anything else MarkdownV2

    Returns:
        str: Escaped message text
    """
    if parse_mode == PARSE_MODE_HTML:
        return (
            f"{MESSAGE_ICON} <b>{html_escape(message.subject)}</b>\n"
            f"<blockquote expandable>{html_escape(message.body)}</blockquote>"
        )
    return (
        f"{MESSAGE_ICON} *{escape_markdown(message.subject)}*\n"
        f"{format_expandable_quote(message.body)}"
    )


def build_notification(message: ExtractedMessage, parse_mode: str) -> Notification:
    return Notification(text=format_message(message, parse_mode), parse_mode=parse_mode)
