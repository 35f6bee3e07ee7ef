"""Execution engine.

Sends built requests through their bound session, times them, saves
response bodies that have a recognisable content type and prints a one
line summary per response.
"""

from __future__ import annotations

import logging
import mimetypes
import sys
import time
from datetime import datetime, timezone

import requests
import urllib3

from httper.errors import ResponseBodyError, SendRequestError
from httper.model import BuiltRequest

logger = logging.getLogger(__name__)

# Content types too generic to pick a file extension from
UNSAVED_CONTENT_TYPES = (
    "application/octet-stream",
    "text/plain; charset=utf-8",
    "text/plain",
)

DEFAULT_TIMEOUT = 30


class ExchangeResult:
    """Outcome of sending one request."""

    __slots__ = (
        "status_code",
        "reason",
        "elapsed",
        "content_length",
        "content_type",
        "saved_to",
    )

    def __init__(
        self,
        status_code: int,
        reason: str,
        elapsed: float,
        content_length: int,
        content_type: str | None,
        saved_to: str | None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.elapsed = elapsed
        self.content_length = content_length
        self.content_type = content_type
        self.saved_to = saved_to


def build_client(
    verify_tls: bool = False, proxy: str | None = None
) -> requests.Session:
    """Create the session shared by every request in a file.

    Args:
        verify_tls: Whether to verify server certificates. Off by default so
            local services with self-signed certificates work.
        proxy: Optional proxy URL used for both HTTP and HTTPS.

    Returns:
        The configured session.
    """
    session = requests.Session()
    session.verify = verify_tls
    if not verify_tls:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    if proxy:
        session.proxies = {"http": proxy, "https": proxy}
    return session


def savable_content_type(content_type: str | None) -> str | None:
    """Return the media type worth saving a body for, if any."""
    if not content_type or content_type.strip().lower() in UNSAVED_CONTENT_TYPES:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None


def response_filename(extension: str, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return f"response-{stamp}{extension}"


def save_response(
    content: bytes, content_type: str | None, output: str | None = None
) -> str | None:
    """Write *content* to disk when its content type maps to an extension.

    Returns:
        The path written, or ``None`` when nothing was saved.
    """
    media_type = savable_content_type(content_type)
    if media_type is None:
        return None
    extension = mimetypes.guess_extension(media_type)
    if extension is None:
        logger.debug("No file extension known for %s", media_type)
        return None

    filename = output or response_filename(extension)
    try:
        with open(filename, "wb") as fh:
            fh.write(content)
    except OSError as exc:
        logger.warning("Could not save response to %s: %s", filename, exc)
        print(f"Failed to write response to file: {exc}", file=sys.stderr)
        return None
    return filename


def send_one(
    request: BuiltRequest,
    output: str | None = None,
    verbose: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
) -> ExchangeResult:
    """Send one request and collect its response.

    Args:
        request: The request to send; it is sent through its own session.
        output: Where to save the body, instead of a timestamped name.
        verbose: Print the request, the response headers and the body.
        timeout: Connect and read timeout in seconds.

    Returns:
        An ExchangeResult describing the response.

    Raises:
        SendRequestError: If the request could not be sent.
        ResponseBodyError: If the response body could not be read.
    """
    if verbose:
        print(f"\n{request!r}")
        if request.body is not None:
            print(request.body)
        print("-" * 80)

    start = time.perf_counter()
    try:
        prepared = request.prepare()
        logger.debug("Sending %s %s", prepared.method, prepared.url)
        response = request.client.send(prepared, timeout=timeout, stream=True)
    except requests.RequestException as exc:
        raise SendRequestError(exc) from exc
    elapsed = time.perf_counter() - start

    try:
        content = response.content
    except requests.RequestException as exc:
        raise ResponseBodyError(exc) from exc
    finally:
        response.close()

    content_type = response.headers.get("Content-Type")
    saved_to = save_response(content, content_type, output)

    declared = response.headers.get("Content-Length", "")
    content_length = int(declared) if declared.isdigit() else len(content)

    if verbose:
        print(f"Headers: {dict(response.headers)}")
        if content_type:
            if not content_type.lower().startswith("image"):
                print(f"Content: {content.decode('utf-8', errors='replace')}")
            print(f"Content type: {content_type}")

    logger.debug(
        "Received %s from %s in %.3fs", response.status_code, prepared.url, elapsed
    )
    return ExchangeResult(
        status_code=response.status_code,
        reason=response.reason or "",
        elapsed=elapsed,
        content_length=content_length,
        content_type=content_type,
        saved_to=saved_to,
    )


def print_report(result: ExchangeResult) -> None:
    """Print the one-line summary for a response."""
    status = f"{result.status_code} {result.reason}".strip()
    millis = int(result.elapsed * 1000)
    print(
        f"\nResponse code: {status}; Time: {millis}ms ({result.elapsed:.6f}s); "
        f"Content length: {result.content_length} bytes "
        f"({result.content_length / 1_000_000:.2f} MB)"
    )
    if result.saved_to:
        print(f"Saved response to: {result.saved_to}")
