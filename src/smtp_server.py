"""
SMTP to Telegram bridge - process entry point.

Thin orchestration layer: reads configuration, configures logging, and runs
a threaded TCP server that hands every accepted connection to an
SMTPSession. All sessions share one Config and one Notifier.

Policy: notifications are fire-and-forget. No retries, no queue, no limit on
concurrent connections.
"""

import argparse
import logging
import os
import socketserver
import sys
from typing import List, Optional

from domain.models import (
    Config,
    ConfigurationError,
    PARSE_MODE_MARKDOWN,
    SUPPORTED_PARSE_MODES,
)
from domain.notifier import Notifier
from domain.session import SMTPSession

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)s - %(message)s'

USAGE_EXAMPLE = "example:\n  smtp2tg --token abc123 --chatid 123456789 --parsemode HTML --verbose"


class SMTPRequestHandler(socketserver.StreamRequestHandler):
    """Runs one SMTPSession over the accepted connection."""

    server: "SMTPBridgeServer"

    def handle(self) -> None:
        peer = f"{self.client_address[0]}:{self.client_address[1]}"
        logger.info(f"Connection accepted from {peer}")

        session = SMTPSession(self.rfile, self.wfile, self.server.notifier, peer=peer)
        try:
            session.run()
        except OSError as e:
            logger.warning(f"Client error ({peer}): {e}")


class SMTPBridgeServer(socketserver.ThreadingTCPServer):
    """
    Listening socket with one thread per connection.

    There is no cap on concurrent connections and no idle timeout.
    """

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, config: Config, notifier: Optional[Notifier] = None):
        self.config = config
        self.notifier = notifier or Notifier(config)
        super().__init__((config.host, config.port), SMTPRequestHandler)


class BridgeArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on bad arguments."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"ERROR: {message}\n")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


def build_arg_parser() -> argparse.ArgumentParser:
    parser = BridgeArgumentParser(
        prog='smtp2tg',
        description='SMTP2TG - Lightweight SMTP to Telegram forwarder',
        epilog=USAGE_EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '-t', '--token',
        default=os.environ.get('SMTP2TG_TOKEN', ''),
        help='Telegram bot token (env: SMTP2TG_TOKEN)'
    )
    parser.add_argument(
        '-c', '--chatid',
        default=os.environ.get('SMTP2TG_CHAT_ID', ''),
        help='Telegram chat ID (env: SMTP2TG_CHAT_ID)'
    )
    parser.add_argument(
        '-p', '--parsemode',
        default=os.environ.get('SMTP2TG_PARSE_MODE', PARSE_MODE_MARKDOWN),
        help=f"Message format: {' or '.join(SUPPORTED_PARSE_MODES)} (default: {PARSE_MODE_MARKDOWN})"
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        default=_env_flag('SMTP2TG_VERBOSE'),
        help='Enable verbose output (env: SMTP2TG_VERBOSE)'
    )
    parser.add_argument(
        '--host',
        default=os.environ.get('SMTP2TG_HOST', '0.0.0.0'),
        help='Listening interface (default: 0.0.0.0)'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=os.environ.get('SMTP2TG_PORT', '2525'),
        help='Listening port (default: 2525)'
    )
    return parser


def parse_config(argv: Optional[List[str]] = None) -> Config:
    """
    Build the process configuration from arguments and environment.

    Command line values take precedence over SMTP2TG_* environment variables.

    Args:
        argv: Argument list, defaults to sys.argv[1:]

    Returns:
        Config: Validated configuration

    Raises:
        ConfigurationError: If token or chat id is missing, or a value is invalid
    """
    args = build_arg_parser().parse_args(argv)
    config = Config(
        telegram_token=args.token,
        telegram_chat_id=args.chatid,
        parse_mode=args.parsemode,
        verbose=args.verbose,
        host=args.host,
        port=args.port,
    )
    return config.validate()


def configure_logging(verbose: bool) -> None:
    """Send logs to the console; quiet unless verbose."""
    root = logging.getLogger()
    root.setLevel(logging.INFO if verbose else logging.ERROR)

    if not root.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(console_handler)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = parse_config(argv)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    configure_logging(config.verbose)

    try:
        server = SMTPBridgeServer(config)
    except OSError as e:
        logger.error(f"Cannot listen on {config.host}:{config.port}: {e}")
        return 1

    with server:
        logger.info(f"SMTP server running on {config.host}:{config.port}")
        logger.info(f"Configuration: {config!r}")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")
    return 0


if __name__ == '__main__':
    sys.exit(main())
