"""Value types produced by the request-file parser.

A body is one of ``None``, :class:`RawBody`, :class:`UrlEncodedForm` or
:class:`MultipartForm`. Everything here is frozen: a :class:`BuiltRequest`
can be handed to the engine without any risk of one request's headers or
body leaking into another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import requests
from urllib3 import HTTPHeaderDict


@dataclass(frozen=True)
class RequestLine:
    method: str
    url: str


@dataclass(frozen=True)
class HeaderEntry:
    name: str
    value: str


@dataclass(frozen=True)
class RawBody:
    data: bytes


@dataclass(frozen=True)
class FormField:
    key: str
    value: str


@dataclass(frozen=True)
class UrlEncodedForm:
    fields: tuple[FormField, ...]

    def encode(self) -> bytes:
        return "&".join(f"{f.key}={f.value}" for f in self.fields).encode("utf-8")


@dataclass(frozen=True)
class TextPart:
    name: str
    value: str


@dataclass(frozen=True)
class FilePart:
    """A multipart file attachment, read from disk when the file was parsed."""

    name: str
    filename: str
    path: str
    content_type: str
    content: bytes

    def __repr__(self) -> str:
        return (
            f"FilePart(name={self.name!r}, filename={self.filename!r}, "
            f"path={self.path!r}, content_type={self.content_type!r}, "
            f"content=<{len(self.content)} bytes>)"
        )


@dataclass(frozen=True)
class MultipartForm:
    parts: tuple[Union[TextPart, FilePart], ...]


Body = Optional[Union[RawBody, UrlEncodedForm, MultipartForm]]


@dataclass(frozen=True)
class BuiltRequest:
    """A fully parsed request, bound to the session that will send it."""

    method: str
    url: str
    headers: tuple[HeaderEntry, ...]
    body: Body
    client: requests.Session

    def __repr__(self) -> str:
        return (
            f"BuiltRequest(method={self.method!r}, url={self.url!r}, "
            f"headers=<{len(self.headers)} headers>, "
            f"body={describe_body(self.body)})"
        )

    def header(self, name: str) -> Optional[str]:
        """Return the first value of header *name*, ignoring case."""
        wanted = name.lower()
        for entry in self.headers:
            if entry.name.lower() == wanted:
                return entry.value
        return None

    def merged_headers(self) -> HTTPHeaderDict:
        """Collapse repeated headers into one comma-joined value each.

        ``requests`` keys headers by name, so repeated entries have to be
        combined before they reach it.
        """
        headers = HTTPHeaderDict()
        for entry in self.headers:
            if (
                isinstance(self.body, MultipartForm)
                and entry.name.lower() == "content-type"
            ):
                # requests writes its own header carrying the boundary
                continue
            headers.add(entry.name, entry.value)
        return headers

    def to_requests(self) -> requests.Request:
        data = None
        files = None
        if isinstance(self.body, RawBody):
            data = self.body.data
        elif isinstance(self.body, UrlEncodedForm):
            # fields are already in wire form; requests would encode them again
            data = self.body.encode()
        elif isinstance(self.body, MultipartForm):
            files = []
            for part in self.body.parts:
                if isinstance(part, FilePart):
                    files.append(
                        (part.name, (part.filename, part.content, part.content_type))
                    )
                else:
                    files.append((part.name, (None, part.value)))

        return requests.Request(
            method=self.method,
            url=self.url,
            headers=dict(self.merged_headers().itermerged()),
            data=data,
            files=files,
        )

    def prepare(self) -> requests.PreparedRequest:
        """Prepare the request with the bound session's configuration."""
        return self.client.prepare_request(self.to_requests())


def describe_body(body: Body) -> str:
    if body is None:
        return "<none>"
    if isinstance(body, RawBody):
        return f"<raw {len(body.data)} bytes>"
    if isinstance(body, UrlEncodedForm):
        return f"<urlencoded {len(body.fields)} fields>"
    return f"<multipart {len(body.parts)} parts>"
