"""httper: main entry point.

Reads a request file, parses every request in it up front, then sends them
in file order and prints a summary line for each response.
"""

import logging
import sys

from httper.cli import parse_cli
from httper.engine import build_client, print_report, send_one
from httper.errors import HttperError, RequestFileError
from httper.parser import parse_request_file


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Run httper.

    Args:
        argv: Optional argument list (defaults to sys.argv).

    Returns:
        Exit code (0 = all requests sent, 1 = a request failed,
        2 = the request file could not be read or parsed).
    """
    args = parse_cli(argv)
    configure_logging(args.verbose)

    client = build_client(verify_tls=args.verify_tls, proxy=args.proxy)

    try:
        built = parse_request_file(args.file, client)
    except RequestFileError as exc:
        print(f"Error parsing request file: {exc}", file=sys.stderr)
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error reading request file: {exc}", file=sys.stderr)
        return 2

    for request in built:
        try:
            result = send_one(
                request,
                output=args.output,
                verbose=args.verbose,
                timeout=args.timeout,
            )
        except HttperError as exc:
            print(f"Error running request: {exc}", file=sys.stderr)
            return 1
        print_report(result)

    return 0


if __name__ == "__main__":
    sys.exit(main())
