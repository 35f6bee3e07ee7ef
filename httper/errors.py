"""Error taxonomy for parsing request files and sending the requests.

Every parse failure is a ``RequestFileError`` (and therefore also a
``ValueError``), so callers can stop the whole run with a single except
clause. Execution failures are reported separately.
"""

from __future__ import annotations


class HttperError(Exception):
    """Base class for all httper errors."""


class RequestFileError(HttperError, ValueError):
    """A request file could not be turned into requests."""

    message = "Invalid request file"

    def __init__(self, *args: object) -> None:
        super().__init__(*args)
        self.block: int | None = None

    def describe(self) -> str:
        return self.message

    def __str__(self) -> str:
        text = self.describe()
        if self.block is not None:
            text = f"{text} (request #{self.block})"
        return text


class EmptyRequest(RequestFileError):
    message = "Empty request file"


class NoRequestLine(RequestFileError):
    message = "No request line found"


class NotEnoughParts(RequestFileError):
    def __init__(self, line: str) -> None:
        super().__init__(line)
        self.line = line

    def describe(self) -> str:
        return f"Not enough parts in request line: {self.line}"


class InvalidMethod(RequestFileError):
    def __init__(self, method: str) -> None:
        super().__init__(method)
        self.method = method

    def describe(self) -> str:
        return f"Invalid method: {self.method}"


class InvalidUrl(RequestFileError):
    def __init__(self, url: str, cause: object) -> None:
        super().__init__(url, cause)
        self.url = url
        self.cause = cause

    def describe(self) -> str:
        return f"Invalid url '{self.url}': {self.cause}"


class InvalidHeader(RequestFileError):
    def __init__(self, line: str) -> None:
        super().__init__(line)
        self.line = line

    def describe(self) -> str:
        return f"Invalid header: {self.line}"


class InvalidFormPart(RequestFileError):
    """A multipart body line that is neither a part marker nor part content."""

    def __init__(self, line: str) -> None:
        super().__init__(line)
        self.line = line

    def describe(self) -> str:
        return f"Invalid form part: {self.line}"


class AttachmentError(RequestFileError):
    """A file referenced by a body could not be read."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(path, cause)
        self.path = path
        self.cause = cause

    def describe(self) -> str:
        reason = self.cause.strerror or self.cause
        return f"Cannot read body file '{self.path}': {reason}"


class SendRequestError(HttperError):
    def __init__(self, cause: Exception) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"Error sending request: {self.cause}"


class ResponseBodyError(HttperError):
    def __init__(self, cause: Exception) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"Error reading response: {self.cause}"
