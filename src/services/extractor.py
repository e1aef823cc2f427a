"""
Message extraction for captured SMTP DATA blocks.

This module reduces the raw lines of a DATA block to a subject and a
plain-text body. Only the Subject header is read; every other header is
discarded.
"""

import logging
import re
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from typing import Iterable, List

from domain.models import ExtractedMessage, NO_SUBJECT

logger = logging.getLogger(__name__)

END_OF_DATA = "."
SUBJECT_PREFIX = "subject:"

# RFC 5322 field name: printable ASCII except colon, then a colon
HEADER_FIELD_RE = re.compile(r'^[!-9;-~]+:')


def is_header_line(line: str) -> bool:
    """Check if line is a header field or a folded continuation of one."""
    return bool(HEADER_FIELD_RE.match(line)) or line[:1] in (' ', '\t')


def decode_subject(raw: str) -> str:
    """
    Decode RFC 2047 encoded words in a subject.

    Example:
        >>> decode_subject("=?utf-8?B?SGVsbG8=?=")
        'Hello'

    Returns:
        str: Decoded subject, or raw unchanged if it cannot be decoded
    """
    if '=?' not in raw:
        return raw
    try:
        return str(make_header(decode_header(raw)))
    except (HeaderParseError, LookupError, UnicodeDecodeError) as e:
        logger.info(f"Keeping undecodable subject as-is: {e}")
        return raw


def extract_message(lines: Iterable[str]) -> ExtractedMessage:
    """
    Split a DATA block into subject and body.

    Reads lines until one equals "." or the input ends. Lines must already
    have their line terminators removed.

    While in the header block:
    - a blank or whitespace-only line ends the headers
    - the first line starting with "Subject:" (any case) sets the subject
    - a line that is not header syntax means there is no header block;
      that line starts the body

    Args:
        lines: Captured lines, without terminators

    Returns:
        ExtractedMessage: Subject (never empty) and stripped body

    Example:
        >>> extract_message(["Subject: Test", "", "line1", "."])
        ExtractedMessage(subject='Test', body='line1')
    """
    subject = ""
    body: List[str] = []
    in_headers = True

    for line in lines:
        if line == END_OF_DATA:
            break

        if in_headers:
            if not line.strip():
                in_headers = False
                continue
            if is_header_line(line):
                if not subject and line.lower().startswith(SUBJECT_PREFIX):
                    subject = decode_subject(line[len(SUBJECT_PREFIX):].strip())
                continue
            in_headers = False

        body.append(line + '\n')

    return ExtractedMessage(
        subject=subject or NO_SUBJECT,
        body=''.join(body).strip()
    )
