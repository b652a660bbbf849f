"""dirstream entry point.

Changes:
  - 2026-10-16: --upstream overrides DIRSTREAM_UPSTREAM_URL for this run.
  - 2026-10-14: Rich logging; --log-level flag.
  - 2026-10-13: ``serve`` subcommand (also the default).
"""

import argparse
import logging
import os
import sys

from dirstream import __version__
from dirstream.config import get_settings
from dirstream.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirstream",
        description="Browse an HTTP directory index and stream its files with range support",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dirstream                                   Serve on 0.0.0.0:5000 (default)
  dirstream serve --port 8080                 Serve on another port
  dirstream --upstream https://files.example  Browse a different index server
  dirstream --dev                             Auto-reload on code changes
""",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="serve",
        choices=["serve"],
        help="What to run (only 'serve' for now)",
    )
    parser.add_argument("--host", type=str, default=None, help="Host to bind (default: settings)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default: settings)")
    parser.add_argument(
        "--upstream", type=str, default=None, help="Base URL of the upstream index server"
    )
    parser.add_argument(
        "--log-level", type=str, default=None, help="Log level (default: settings, INFO)"
    )
    parser.add_argument("--dev", action="store_true", help="Enable auto-reload")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.upstream:
        # Environment rather than an object so the --dev reloader's fresh
        # process picks it up too.
        os.environ["DIRSTREAM_UPSTREAM_URL"] = args.upstream
        get_settings.cache_clear()

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(level=args.log_level or settings.log_level)

    from dirstream.api.serve import run_api_server

    try:
        run_api_server(settings, host=args.host, port=args.port, dev=args.dev)
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
