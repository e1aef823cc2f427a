"""
Per-connection SMTP session handling.

Implements the small SMTP subset the bridge understands:
EHLO/HELO, MAIL FROM:, RCPT TO:, DATA and QUIT. There is no extension
negotiation and HELO is not required before MAIL.

The session works on binary file-like streams (socket makefile objects in
production, io.BytesIO in tests) and never raises protocol errors: bad
command order and unknown commands are answered with a reply code and the
session continues.
"""

import logging
from enum import Enum
from typing import BinaryIO, Iterator, Optional

from .models import EnvelopeState
from .notifier import Notifier
from services.extractor import extract_message

logger = logging.getLogger(__name__)

SERVER_IDENTITY = "smtp2tg"

REPLY_READY = f"220 {SERVER_IDENTITY} ready"
REPLY_HELLO = f"250 {SERVER_IDENTITY}"
REPLY_OK = "250 OK"
REPLY_ACCEPTED = "250 Message accepted"
REPLY_START_DATA = "354 End with <CR><LF>.<CR><LF>"
REPLY_BYE = "221 Bye"
REPLY_MAIL_FIRST = "503 MAIL first"
REPLY_NEED_ENVELOPE = "503 Need MAIL and RCPT"
REPLY_NOT_SUPPORTED = "502 Command not supported"


class SessionAction(Enum):
    """What the session does after a command has been answered."""
    CONTINUE = "continue"
    START_DATA = "start_data"
    CLOSE = "close"


def _strip_terminator(raw: bytes) -> str:
    """Decode a received line and drop its CR/LF terminator only."""
    return raw.decode('utf-8', errors='replace').rstrip('\r\n')


class SMTPSession:
    """
    SMTP state machine for one accepted connection.

    Envelope state only ever moves INITIAL -> SENDER_SET -> RECIPIENT_SET,
    except that MAIL FROM: always sets SENDER_SET. It is not reset after a
    completed transaction, so a later DATA is accepted without a new
    MAIL FROM:/RCPT TO: pair.
    """

    def __init__(
        self,
        reader: BinaryIO,
        writer: BinaryIO,
        notifier: Notifier,
        peer: Optional[str] = None
    ):
        """
        Initialize session.

        Args:
            reader: Binary stream to read client lines from
            writer: Binary stream replies are written to
            notifier: Shared notifier for accepted messages
            peer: Client address, for logging only
        """
        self.reader = reader
        self.writer = writer
        self.notifier = notifier
        self.peer = peer or "unknown"
        self.state = EnvelopeState.INITIAL

    def run(self) -> None:
        """
        Serve the connection until QUIT or end of stream.

        Raises:
            OSError: On read/write failures (caller ends the connection)
        """
        self.reply(REPLY_READY)

        while self._command_loop():
            message = extract_message(self._data_lines())
            self.notifier.notify(message)
            self.reply(REPLY_ACCEPTED)

        logger.info(f"Session with {self.peer} ended")

    def handle_command(self, command: str) -> SessionAction:
        """
        Answer a single command line and update envelope state.

        Args:
            command: Command line without its terminator

        Returns:
            SessionAction telling the caller how to proceed
        """
        if command.startswith("EHLO") or command.startswith("HELO"):
            self.reply(REPLY_HELLO)

        elif command.startswith("MAIL FROM:"):
            self.state = EnvelopeState.SENDER_SET
            self.reply(REPLY_OK)

        elif command.startswith("RCPT TO:"):
            if self.state < EnvelopeState.SENDER_SET:
                self.reply(REPLY_MAIL_FIRST)
            else:
                self.state = EnvelopeState.RECIPIENT_SET
                self.reply(REPLY_OK)

        elif command.upper() == "DATA":
            if self.state < EnvelopeState.RECIPIENT_SET:
                self.reply(REPLY_NEED_ENVELOPE)
            else:
                self.reply(REPLY_START_DATA)
                return SessionAction.START_DATA

        elif command.upper() == "QUIT":
            self.reply(REPLY_BYE)
            return SessionAction.CLOSE

        else:
            self.reply(REPLY_NOT_SUPPORTED)

        return SessionAction.CONTINUE

    def reply(self, line: str) -> None:
        self.writer.write(line.encode('ascii') + b"\r\n")
        self.writer.flush()

    def _command_loop(self) -> bool:
        """
        Read and answer commands.

        Returns:
            True when DATA was accepted, False when the session is over
        """
        while True:
            raw = self.reader.readline()
            if not raw:
                logger.info(f"Client {self.peer} closed the connection")
                return False

            command = _strip_terminator(raw)
            logger.info(f"SMTP command: {command}")

            action = self.handle_command(command)
            if action is SessionAction.START_DATA:
                return True
            if action is SessionAction.CLOSE:
                return False

    def _data_lines(self) -> Iterator[str]:
        """Yield DATA lines until end of stream; the extractor stops at "."."""
        while True:
            raw = self.reader.readline()
            if not raw:
                logger.info(f"Client {self.peer} closed the connection during DATA")
                return
            yield _strip_terminator(raw)
