"""Command-line interface for hyperpaint."""

import argparse
import sys

import uvicorn

from hyperpaint import __version__
from hyperpaint.logging_config import LEVELS, configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hyperpaint",
        description="hyperpaint - serve the 4D projection studio over HTTP and WebSocket",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Restart on source changes")
    parser.add_argument(
        "--log-level",
        choices=sorted(LEVELS),
        type=str.upper,
        help="Override LOG_LEVEL",
    )
    parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        help="Override LOG_FORMAT",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(args: list[str] | None = None) -> int:
    """Run the hyperpaint server.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success).
    """
    parsed = build_parser().parse_args(args)

    configure_logging(
        level=LEVELS[parsed.log_level] if parsed.log_level else None,
        format_type=parsed.log_format,
    )
    print(f"hyperpaint studio listening on http://{parsed.host}:{parsed.port} (Ctrl+C to stop)")

    uvicorn.run(
        "hyperpaint.server.app:app",
        host=parsed.host,
        port=parsed.port,
        reload=parsed.reload,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
