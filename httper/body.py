"""Body resolution for a single request block.

The kind of body is chosen from the block's ``Content-Type`` header, never
by looking at the text itself:

  - no body text                      -> ``None``
  - ``application/x-www-form-urlencoded`` -> :class:`UrlEncodedForm`
  - ``multipart/form-data``           -> :class:`MultipartForm`
  - anything else                     -> :class:`RawBody`

Multipart parts are introduced by marker lines::

    --name=title
    Holiday pictures
    --name=photo; path=img/beach.jpg; type=image/jpeg

Files referenced by a body are read immediately, so a missing file fails
the parse before anything is sent.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import re
from typing import Optional, Sequence, Union

from httper.errors import AttachmentError, InvalidFormPart
from httper.fs import FileSystem, resolve_path
from httper.model import (
    Body,
    FilePart,
    FormField,
    HeaderEntry,
    MultipartForm,
    RawBody,
    TextPart,
    UrlEncodedForm,
)

logger = logging.getLogger(__name__)

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM_DATA = "multipart/form-data"
DEFAULT_FILE_TYPE = "application/octet-stream"

# "< path" on its own replaces the body with the file's content
FILE_REFERENCE = re.compile(r"^<\s+(?P<path>\S.*?)\s*$")
PART_MARKER = "--"
PART_KEYS = frozenset({"name", "filename", "path", "type"})


def media_type(headers: Sequence[HeaderEntry]) -> Optional[str]:
    """Return the lower-cased media type of the first Content-Type header."""
    for entry in headers:
        if entry.name.lower() == "content-type":
            return entry.value.split(";", 1)[0].strip().lower()
    return None


def read_file(fs: FileSystem, base_dir: str, path: str) -> tuple[str, bytes]:
    resolved = resolve_path(base_dir, path)
    try:
        content = fs.read_bytes(resolved)
    except OSError as exc:
        raise AttachmentError(resolved, exc) from exc
    logger.debug("Read %d bytes from %s", len(content), resolved)
    return resolved, content


def resolve_body(
    headers: Sequence[HeaderEntry],
    lines: Sequence[str],
    base_dir: str,
    fs: FileSystem,
) -> Body:
    """Build the body of a block from the lines after its header section.

    Args:
        headers: The block's parsed headers.
        lines: Body lines as they appear in the file (``\\r`` kept).
        base_dir: Directory that relative file references are joined to.
        fs: Filesystem used to read referenced files.

    Returns:
        The body variant, or ``None`` when there is no body text.

    Raises:
        InvalidFormPart: If a multipart body is malformed.
        AttachmentError: If a referenced file cannot be read.
    """
    if not any(line.strip() for line in lines):
        return None

    kind = media_type(headers)
    if kind == FORM_URLENCODED:
        return parse_urlencoded(lines)
    if kind == MULTIPART_FORM_DATA:
        return parse_multipart(lines, base_dir, fs)
    return parse_raw(lines, base_dir, fs)


def parse_raw(lines: Sequence[str], base_dir: str, fs: FileSystem) -> RawBody:
    filled = [line for line in lines if line.strip()]
    if len(filled) == 1:
        match = FILE_REFERENCE.match(filled[0].rstrip("\r"))
        if match:
            _, content = read_file(fs, base_dir, match.group("path"))
            return RawBody(content)

    text = "\n".join(lines)
    if text.endswith("\r"):
        text = text[:-1]
    return RawBody(text.encode("utf-8"))


def parse_urlencoded(lines: Sequence[str]) -> UrlEncodedForm:
    fields: list[FormField] = []
    for line in lines:
        for segment in line.strip().split("&"):
            if not segment:
                continue
            key, _, value = segment.partition("=")
            fields.append(FormField(key, value))
    return UrlEncodedForm(tuple(fields))


def parse_part_marker(line: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for item in line[len(PART_MARKER):].split(";"):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        key = key.strip().lower()
        value = value.strip()
        if not sep or key not in PART_KEYS:
            raise InvalidFormPart(line)
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        params[key] = value
    if not params.get("name"):
        raise InvalidFormPart(line)
    return params


def trim_blank(lines: list[str]) -> list[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def build_part(
    params: dict[str, str],
    marker: str,
    content: list[str],
    base_dir: str,
    fs: FileSystem,
) -> Union[TextPart, FilePart]:
    content = trim_blank(content)
    if "path" not in params:
        return TextPart(params["name"], "\n".join(content))

    if content:
        raise InvalidFormPart(content[0])
    if not params["path"]:
        raise InvalidFormPart(marker)

    resolved, data = read_file(fs, base_dir, params["path"])
    filename = params.get("filename") or os.path.basename(resolved)
    content_type = (
        params.get("type")
        or mimetypes.guess_type(filename)[0]
        or DEFAULT_FILE_TYPE
    )
    return FilePart(params["name"], filename, resolved, content_type, data)


def parse_multipart(
    lines: Sequence[str], base_dir: str, fs: FileSystem
) -> MultipartForm:
    parts: list[Union[TextPart, FilePart]] = []
    current: Optional[tuple[dict[str, str], str]] = None
    content: list[str] = []

    for raw in lines:
        line = raw.rstrip("\r")
        if line.startswith(PART_MARKER):
            if current is not None:
                parts.append(build_part(*current, content, base_dir, fs))
            current = (parse_part_marker(line), line)
            content = []
        elif current is None:
            if line.strip():
                raise InvalidFormPart(line)
        else:
            content.append(line)

    if current is not None:
        parts.append(build_part(*current, content, base_dir, fs))
    return MultipartForm(tuple(parts))
