"""httper: run the HTTP requests described in a plain-text file."""

__version__ = "0.1.0"
