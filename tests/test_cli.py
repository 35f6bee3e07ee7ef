"""Tests for the CLI module."""

import pytest

from httper.cli import build_parser, parse_cli, validate_args


class TestBuildParser:
    """Tests for the argument parser construction."""

    def test_file_argument(self):
        args = build_parser().parse_args(["requests.http"])
        assert args.file == "requests.http"

    def test_defaults(self):
        args = build_parser().parse_args(["f"])
        assert args.verbose is False
        assert args.output is None
        assert args.timeout == 30
        assert args.proxy is None
        assert args.verify_tls is False

    def test_short_flags(self):
        args = build_parser().parse_args(["-v", "-o", "out.png", "f"])
        assert args.verbose is True
        assert args.output == "out.png"

    def test_long_flags(self):
        args = build_parser().parse_args([
            "--verbose",
            "--output", "out.json",
            "--timeout", "2.5",
            "--proxy", "http://127.0.0.1:8080",
            "--verify-tls",
            "f",
        ])
        assert args.verbose is True
        assert args.output == "out.json"
        assert args.timeout == 2.5
        assert args.proxy == "http://127.0.0.1:8080"
        assert args.verify_tls is True

    def test_missing_file_argument(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert "httper" in capsys.readouterr().out


class TestValidateArgs:
    """Tests for argument validation."""

    def test_nonexistent_file_exits(self, capsys):
        args = build_parser().parse_args(["/nonexistent/file.http"])
        with pytest.raises(SystemExit):
            validate_args(args)
        assert "Request file not found" in capsys.readouterr().err

    def test_directory_exits(self, tmp_path):
        args = build_parser().parse_args([str(tmp_path)])
        with pytest.raises(SystemExit):
            validate_args(args)

    def test_valid_file_passes(self, tmp_path):
        f = tmp_path / "req.http"
        f.write_text("GET https://example.com\n")
        args = build_parser().parse_args([str(f)])
        # Should not raise
        validate_args(args)

    def test_non_positive_timeout_exits(self, tmp_path):
        f = tmp_path / "req.http"
        f.write_text("GET https://example.com\n")
        args = build_parser().parse_args(["--timeout", "0", str(f)])
        with pytest.raises(SystemExit):
            validate_args(args)


class TestParseCli:
    """Tests for the full parse_cli flow."""

    def test_full_parse_flow(self, tmp_path):
        f = tmp_path / "req.http"
        f.write_text("GET https://example.com\n")
        args = parse_cli(["-v", str(f)])
        assert args.file == str(f)
        assert args.verbose is True
