"""
The book structure mdbook hands to preprocessors.

Items wrap the decoded JSON in place rather than copying it, so fields
this package does not know about survive the round trip unchanged.

    {"sections": [
        {"Chapter": {"name": ..., "content": ..., "sub_items": [...], ...}},
        "Separator",
        {"PartTitle": "Part One"}
    ], "__non_exhaustive": null}
"""


class BookItem:
    """Any entry of a book's section list."""

    def __init__(self, data):
        self._data = data

    def to_json(self):
        return self._data


class Chapter(BookItem):
    """A content-bearing item. Edits to `content` write through to the JSON."""

    @property
    def _chapter(self):
        return self._data["Chapter"]

    @property
    def name(self):
        return self._chapter.get("name", "")

    @property
    def content(self):
        return self._chapter.get("content", "")

    @content.setter
    def content(self, value):
        self._chapter["content"] = value

    @property
    def number(self):
        return self._chapter.get("number")

    @property
    def path(self):
        """Path relative to the book's src/ directory; None for draft chapters."""
        return self._chapter.get("path")

    @property
    def source_path(self):
        return self._chapter.get("source_path")

    @property
    def parent_names(self):
        return self._chapter.get("parent_names", [])

    @property
    def sub_items(self):
        return [item_from_json(raw) for raw in self._chapter.get("sub_items") or []]

    @property
    def label(self):
        """What to call this chapter in log output."""
        return self.source_path or self.path or self.name or "<untitled>"


class Separator(BookItem):
    pass


class PartTitle(BookItem):

    @property
    def title(self):
        return self._data["PartTitle"]


def item_from_json(data):
    """Wrap one raw section entry. Unknown shapes become plain BookItems."""
    if data == "Separator":
        return Separator(data)
    if isinstance(data, dict) and len(data) == 1:
        if isinstance(data.get("Chapter"), dict):
            return Chapter(data)
        if "PartTitle" in data:
            return PartTitle(data)
    return BookItem(data)


class Book:
    """
    Ordered book items.

    Usage:
        book = Book.from_json(data)
        for chapter in book.iter_chapters():
            chapter.content = transform(chapter.content)
        json.dump(book.to_json(), out)
    """

    def __init__(self, data):
        self._data = data

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise ValueError(f"book must be a JSON object, got {type(data).__name__}")
        sections = data.get("sections")
        if not isinstance(sections, list):
            raise ValueError("book has no 'sections' list")
        return cls(data)

    def to_json(self):
        return self._data

    @property
    def sections(self):
        return [item_from_json(raw) for raw in self._data["sections"]]

    def iter_items(self):
        """All items depth-first in document order: each chapter before its sub-items."""
        return _walk(self.sections)

    def iter_chapters(self):
        for item in self.iter_items():
            if isinstance(item, Chapter):
                yield item


def _walk(items):
    for item in items:
        yield item
        if isinstance(item, Chapter):
            yield from _walk(item.sub_items)
