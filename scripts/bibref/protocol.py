"""
The mdbook preprocessor handshake.

mdbook writes `[context, book]` as JSON to the preprocessor's stdin and
reads the processed book back as JSON from its stdout.
"""

import json
import sys

from bibref.book import Book


# The mdbook release this preprocessor's JSON handling follows
MDBOOK_VERSION = "0.4.10"


class ProtocolError(Exception):
    """Raised when stdin does not hold a valid `[context, book]` pair."""
    pass


class PreprocessorContext:
    """The context half of mdbook's input: book root, book.toml, renderer."""

    def __init__(self, data):
        self._data = data

    @property
    def root(self):
        return self._data.get("root")

    @property
    def config(self):
        return self._data.get("config", {})

    @property
    def renderer(self):
        return self._data.get("renderer")

    @property
    def mdbook_version(self):
        return self._data.get("mdbook_version")


def parse_input(stream):
    """Read `[context, book]` from a stream. Returns (PreprocessorContext, Book)."""
    try:
        data = json.load(stream)
    except ValueError as e:
        raise ProtocolError(f"Unable to parse the input: {e}")

    if not isinstance(data, list) or len(data) != 2:
        raise ProtocolError("Expected a JSON array of [context, book] on stdin")

    ctx_data, book_data = data
    if not isinstance(ctx_data, dict):
        raise ProtocolError("Preprocessor context must be a JSON object")

    try:
        book = Book.from_json(book_data)
    except ValueError as e:
        raise ProtocolError(f"Invalid book: {e}")

    return PreprocessorContext(ctx_data), book


def read_book(stream=None):
    return parse_input(stream or sys.stdin)


def check_version(ctx, name):
    """Warn (never fail) when mdbook is not the version we were written against."""
    if ctx.mdbook_version != MDBOOK_VERSION:
        print(
            f"Warning: The {name} plugin was built against version "
            f"{MDBOOK_VERSION} of mdbook, but we're being called from "
            f"version {ctx.mdbook_version}",
            file=sys.stderr,
        )
        return False
    return True


def write_book(book, stream=None):
    stream = stream or sys.stdout
    json.dump(book.to_json(), stream)
    stream.flush()
