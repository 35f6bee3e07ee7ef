"""Tests for built requests and their hand-off to requests."""

from httper.model import (
    BuiltRequest,
    FilePart,
    FormField,
    HeaderEntry,
    MultipartForm,
    RawBody,
    TextPart,
    UrlEncodedForm,
    describe_body,
)


def make_request(session, headers=(), body=None, method="POST"):
    return BuiltRequest(
        method=method,
        url="https://example.com/api",
        headers=tuple(headers),
        body=body,
        client=session,
    )


class TestBuiltRequest:
    """Tests for BuiltRequest helpers."""

    def test_header_lookup_ignores_case(self, session):
        req = make_request(session, [HeaderEntry("X-Token", "abc")])
        assert req.header("x-token") == "abc"
        assert req.header("missing") is None

    def test_repr_hides_body(self, session):
        req = make_request(session, [HeaderEntry("A", "1")], RawBody(b"secret"))
        text = repr(req)
        assert "POST" in text
        assert "<1 headers>" in text
        assert "<raw 6 bytes>" in text
        assert "secret" not in text

    def test_describe_body(self):
        assert describe_body(None) == "<none>"
        assert describe_body(UrlEncodedForm((FormField("a", "1"),))) == (
            "<urlencoded 1 fields>"
        )
        assert describe_body(MultipartForm((TextPart("a", "1"),))) == (
            "<multipart 1 parts>"
        )

    def test_file_part_repr_hides_content(self):
        part = FilePart("f", "a.bin", "/data/a.bin", "application/octet-stream", b"xyz")
        assert "<3 bytes>" in repr(part)
        assert "xyz" not in repr(part)


class TestPrepare:
    """Tests for preparing requests through the bound session."""

    def test_no_body(self, session):
        prepared = make_request(session, method="GET").prepare()
        assert prepared.method == "GET"
        assert prepared.url == "https://example.com/api"
        assert prepared.body is None

    def test_raw_body(self, session):
        req = make_request(
            session,
            [HeaderEntry("Content-Type", "application/json")],
            RawBody(b'{"a": 1}'),
        )
        prepared = req.prepare()
        assert prepared.body == b'{"a": 1}'
        assert prepared.headers["Content-Type"] == "application/json"
        assert prepared.headers["Content-Length"] == "8"

    def test_repeated_headers_joined(self, session):
        req = make_request(
            session,
            [HeaderEntry("X-A", "1"), HeaderEntry("Accept", "*/*"), HeaderEntry("x-a", "2")],
        )
        prepared = req.prepare()
        assert prepared.headers["X-A"] == "1, 2"

    def test_urlencoded_body(self, session):
        req = make_request(
            session,
            [HeaderEntry("Content-Type", "application/x-www-form-urlencoded")],
            UrlEncodedForm((FormField("name", "Ada"), FormField("lang", "en"))),
        )
        prepared = req.prepare()
        assert prepared.body == b"name=Ada&lang=en"
        assert prepared.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_urlencoded_body_sent_as_written(self, session):
        req = make_request(
            session,
            [HeaderEntry("Content-Type", "application/x-www-form-urlencoded")],
            UrlEncodedForm(
                (FormField("name", "John%20Doe"), FormField("tag", "a%2Bb"))
            ),
        )
        assert req.prepare().body == b"name=John%20Doe&tag=a%2Bb"

    def test_multipart_body(self, session):
        req = make_request(
            session,
            [HeaderEntry("Content-Type", "multipart/form-data")],
            MultipartForm(
                (
                    TextPart("title", "Holiday"),
                    FilePart(
                        "photo",
                        "beach.png",
                        "/data/img/beach.png",
                        "image/png",
                        b"PNGDATA",
                    ),
                )
            ),
        )
        prepared = req.prepare()
        content_type = prepared.headers["Content-Type"]
        assert content_type.startswith("multipart/form-data; boundary=")
        boundary = content_type.split("boundary=", 1)[1].encode()
        assert boundary in prepared.body
        assert b'name="title"' in prepared.body
        assert b"Holiday" in prepared.body
        assert b'filename="beach.png"' in prepared.body
        assert b"Content-Type: image/png" in prepared.body
        assert b"PNGDATA" in prepared.body
        assert prepared.body.index(b"Holiday") < prepared.body.index(b"PNGDATA")

    def test_session_headers_merged(self, session):
        session.headers["User-Agent"] = "httper-test"
        prepared = make_request(session, method="GET").prepare()
        assert prepared.headers["User-Agent"] == "httper-test"
