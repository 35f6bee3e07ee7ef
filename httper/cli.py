"""Command-line interface for httper."""

import argparse
import os
import sys

from httper import __version__
from httper.engine import DEFAULT_TIMEOUT


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for the httper CLI."""
    parser = argparse.ArgumentParser(
        prog="httper",
        description=(
            "httper v{ver} - send the HTTP requests described in a plain-text "
            "file, one after another, and report status, timing and size.\n\n"
            "Requests are separated by '###' lines or blank lines. Bodies may "
            "be raw text, url-encoded forms or multipart forms with file "
            "attachments resolved next to the request file."
        ).format(ver=__version__),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  httper requests.http\n"
            "  httper -v -o avatar.png upload.http\n"
            "  httper --verify-tls --proxy http://127.0.0.1:8080 api.http\n"
        ),
    )

    parser.add_argument(
        "file",
        help="File containing the HTTP request(s).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print verbose output.",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        default=None,
        help="Output file for the response body.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Timeout in seconds for each request (default: {DEFAULT_TIMEOUT}).",
    )
    parser.add_argument(
        "--proxy",
        default=None,
        help="Route traffic through a proxy (e.g. http://127.0.0.1:8080).",
    )
    parser.add_argument(
        "--verify-tls",
        action="store_true",
        help="Verify server certificates (invalid certificates are accepted "
        "by default).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate parsed CLI arguments.

    Raises:
        SystemExit: If the request file is missing or unreadable, or the
            timeout is not positive.
    """
    if not os.path.isfile(args.file):
        print(f"Error: Request file not found: '{args.file}'", file=sys.stderr)
        sys.exit(1)

    if not os.access(args.file, os.R_OK):
        print(
            f"Error: Request file is not readable: '{args.file}'",
            file=sys.stderr,
        )
        sys.exit(1)

    if args.timeout <= 0:
        print("Error: Timeout must be a positive number.", file=sys.stderr)
        sys.exit(1)


def parse_cli(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and validate command-line arguments.

    Args:
        argv: Optional list of arguments (defaults to sys.argv).

    Returns:
        Parsed and validated argument namespace.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    validate_args(args)
    return args
