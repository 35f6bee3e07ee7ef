"""Request-file parsing engine.

Turns the text of a request file into an ordered list of
:class:`~httper.model.BuiltRequest` values. A file holds one or more
requests::

    # fetch the user
    GET https://api.example.com/users/1 HTTP/1.1
    Accept: application/json

    POST https://api.example.com/users
    Content-Type: application/json

    {"name": "Ada"}

Requests are separated by a ``###`` line, or by blank lines followed by
something that looks like a request line. Parsing is all or nothing: the
first problem aborts the whole file and no requests are returned.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Optional, Sequence

import requests
from urllib3.exceptions import LocationParseError
from urllib3.util import parse_url

from httper.body import resolve_body
from httper.errors import (
    EmptyRequest,
    InvalidHeader,
    InvalidMethod,
    InvalidUrl,
    NoRequestLine,
    NotEnoughParts,
    RequestFileError,
)
from httper.fs import FileSystem, LocalFileSystem
from httper.model import Body, BuiltRequest, HeaderEntry, RequestLine

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset(
    ["GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"]
)

TOKEN_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
# Control characters are not allowed in field values, except HTAB
FORBIDDEN_VALUE_CHARS = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")
REQUEST_LINE_SHAPE = re.compile(r"^[A-Z]+\s+\S")
ABSOLUTE_URL_SHAPE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
BLOCK_DELIMITER = "###"
COMMENT_PREFIXES = ("#", "//")


class RequestBlock:
    """The lines of one request, numbered from 1 in file order."""

    __slots__ = ("index", "lines")

    def __init__(self, index: int, lines: list[str]) -> None:
        self.index = index
        self.lines = lines

    def __repr__(self) -> str:
        return f"RequestBlock(index={self.index}, lines=<{len(self.lines)} lines>)"


def is_comment(line: str) -> bool:
    return line.startswith(COMMENT_PREFIXES) and not line.startswith(BLOCK_DELIMITER)


def looks_like_request_line(line: str) -> bool:
    """Whether *line* reads as the start of a request, valid or not.

    Malformed request lines must still open a block of their own so that
    they are reported instead of being read as the previous request's body.
    """
    if REQUEST_LINE_SHAPE.match(line):
        return True
    tokens = line.split()
    if tokens[0] in HTTP_METHODS or ABSOLUTE_URL_SHAPE.match(tokens[0]):
        return True
    return (
        len(tokens) > 1
        and tokens[0].isalpha()
        and bool(ABSOLUTE_URL_SHAPE.match(tokens[1]))
    )


def starts_request(lines: Sequence[str], pos: int) -> bool:
    """Whether the next meaningful line from *pos* looks like a request line."""
    while pos < len(lines):
        stripped = lines[pos].strip()
        if stripped and not is_comment(stripped):
            return looks_like_request_line(stripped)
        pos += 1
    return False


def split_blocks(text: str) -> list[RequestBlock]:
    """Split file text into request blocks, preserving file order.

    Blank lines inside a block are kept (the first one separates headers
    from body). Trailing blank lines of each block are dropped, and blocks
    without content are discarded.
    """
    lines = text.split("\n")
    chunks: list[list[str]] = []
    current: list[str] = []
    after_blank = False

    def flush() -> None:
        while current and not current[-1].strip():
            current.pop()
        if current:
            chunks.append(list(current))
        current.clear()

    for pos, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith(BLOCK_DELIMITER):
            flush()
            after_blank = False
            continue
        if not stripped:
            if current:
                current.append(line)
            after_blank = True
            continue
        if not current:
            if is_comment(stripped):
                continue
        elif after_blank and starts_request(lines, pos):
            flush()
            if is_comment(stripped):
                continue
        current.append(line)
        after_blank = False
    flush()

    return [RequestBlock(i, chunk) for i, chunk in enumerate(chunks, start=1)]


def validate_url(url: str) -> str:
    try:
        parsed = parse_url(url)
    except LocationParseError as exc:
        raise InvalidUrl(url, exc) from exc
    if not parsed.scheme:
        raise InvalidUrl(url, "relative URL without a base")
    if not parsed.host:
        raise InvalidUrl(url, "empty host")
    return url


def parse_request_line(lines: Sequence[str]) -> RequestLine:
    """Parse the method and URL from the first line of a block.

    Tokens after the URL (usually ``HTTP/1.1``) are ignored.

    Raises:
        NoRequestLine: If the block has no lines.
        NotEnoughParts: If the line has fewer than two tokens.
        InvalidMethod: If the method is not a known HTTP method.
        InvalidUrl: If the URL is not absolute.
    """
    if not lines:
        raise NoRequestLine()

    line = lines[0].strip()
    parts = line.split()
    if len(parts) < 2:
        raise NotEnoughParts(line)

    method, url = parts[0], parts[1]
    if method not in HTTP_METHODS:
        raise InvalidMethod(method)

    return RequestLine(method=method, url=validate_url(url))


def parse_header_line(line: str) -> HeaderEntry:
    text = line.rstrip()
    name, sep, value = text.partition(":")
    if not sep or not TOKEN_PATTERN.match(name):
        raise InvalidHeader(text)
    value = value.strip()
    if FORBIDDEN_VALUE_CHARS.search(value):
        raise InvalidHeader(text)
    return HeaderEntry(name=name, value=value)


def parse_headers(
    lines: Sequence[str],
) -> tuple[tuple[HeaderEntry, ...], list[str]]:
    """Parse header lines up to the first blank line.

    Args:
        lines: The block's lines following the request line.

    Returns:
        The headers in file order (repeats kept) and the remaining body lines.

    Raises:
        InvalidHeader: If a line has no colon or breaks header syntax.
    """
    headers: list[HeaderEntry] = []
    for pos, line in enumerate(lines):
        if not line.strip():
            return tuple(headers), list(lines[pos + 1:])
        headers.append(parse_header_line(line))
    return tuple(headers), []


def assemble(
    request_line: RequestLine,
    headers: tuple[HeaderEntry, ...],
    body: Body,
    client: requests.Session,
) -> BuiltRequest:
    return BuiltRequest(
        method=request_line.method,
        url=request_line.url,
        headers=headers,
        body=body,
        client=client,
    )


def parse_block(
    block: RequestBlock,
    client: requests.Session,
    base_dir: str,
    fs: FileSystem,
) -> BuiltRequest:
    request_line = parse_request_line(block.lines)
    headers, body_lines = parse_headers(block.lines[1:])
    body = resolve_body(headers, body_lines, base_dir, fs)
    return assemble(request_line, headers, body, client)


def parse_requests(
    text: str,
    client: requests.Session,
    base_dir: str,
    fs: Optional[FileSystem] = None,
) -> list[BuiltRequest]:
    """Parse every request in a request file.

    Args:
        text: The full text of the request file.
        client: Configured session every request is bound to.
        base_dir: Directory relative body file references are resolved from.
        fs: Filesystem used to read body files (defaults to the local disk).

    Returns:
        The built requests, in file order.

    Raises:
        RequestFileError: On the first problem found; nothing is returned.
    """
    fs = fs if fs is not None else LocalFileSystem()

    blocks = split_blocks(text)
    if not blocks:
        raise EmptyRequest()
    logger.debug("Found %d request block(s)", len(blocks))

    built: list[BuiltRequest] = []
    for block in blocks:
        try:
            built.append(parse_block(block, client, base_dir, fs))
        except RequestFileError as exc:
            exc.block = block.index
            raise
        logger.debug("Parsed request #%d: %r", block.index, built[-1])
    return built


def load_request_file(filepath: str) -> str:
    """Read and return the contents of a request file.

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: If the file cannot be read.
    """
    with open(filepath, "r", encoding="utf-8-sig") as fh:
        return fh.read()


def parse_request_file(
    filepath: str,
    client: requests.Session,
    fs: Optional[FileSystem] = None,
) -> list[BuiltRequest]:
    """Load *filepath* and parse it, resolving body files next to it."""
    base_dir = os.path.dirname(os.path.abspath(filepath))
    return parse_requests(load_request_file(filepath), client, base_dir, fs)
