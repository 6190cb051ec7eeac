import copy

import pytest

from bibref.book import Book, BookItem, Chapter, PartTitle, Separator, item_from_json
from conftest import chapter


def test_iter_chapters_is_depth_first_in_document_order(book_data):
    book = Book.from_json(book_data)

    names = [c.name for c in book.iter_chapters()]

    assert names == ["Introduction", "Chapter 1", "Section 1.1", "Draft"]


def test_iter_items_keeps_non_chapter_items(book_data):
    book = Book.from_json(book_data)

    kinds = [type(item) for item in book.iter_items()]

    assert kinds == [Chapter, PartTitle, Chapter, Chapter, Separator, Chapter]


def test_content_edits_write_through_to_json(book_data):
    book = Book.from_json(book_data)

    for c in book.iter_chapters():
        c.content = c.content.upper()

    nested = book.to_json()["sections"][2]["Chapter"]["sub_items"][0]
    assert nested["Chapter"]["content"] == "NESTED TEXT.\n"
    assert book.to_json()["sections"][0]["Chapter"]["content"] == "# INTRODUCTION\n"


def test_non_chapter_items_are_untouched(book_data):
    original = copy.deepcopy(book_data)
    book = Book.from_json(book_data)

    for c in book.iter_chapters():
        c.content = "replaced"

    sections = book.to_json()["sections"]
    assert sections[1] == original["sections"][1]
    assert sections[3] == "Separator"


def test_unknown_fields_survive(book_data):
    book_data["__non_exhaustive"] = None
    book_data["sections"][0]["Chapter"]["extra_field"] = {"keep": True}

    book = Book.from_json(book_data)

    assert book.to_json()["__non_exhaustive"] is None
    assert book.to_json()["sections"][0]["Chapter"]["extra_field"] == {"keep": True}


def test_zero_chapter_book_round_trips():
    data = {"sections": ["Separator", {"PartTitle": "Empty"}], "__non_exhaustive": None}
    expected = copy.deepcopy(data)

    book = Book.from_json(data)

    assert list(book.iter_chapters()) == []
    assert book.to_json() == expected


def test_chapter_label_falls_back_to_name_for_drafts():
    draft = item_from_json(chapter("Draft", ""))
    page = item_from_json(chapter("Page", "", path="page.md"))

    assert draft.label == "Draft"
    assert page.label == "page.md"
    assert draft.path is None


def test_chapter_and_part_title_accessors(book_data):
    nested = book_data["sections"][2]["Chapter"]["sub_items"][0]["Chapter"]
    nested["parent_names"] = ["Chapter 1"]
    book = Book.from_json(book_data)

    items = list(book.iter_items())
    chapter_1, section = items[2], items[3]

    assert items[1].title == "Part One"
    assert chapter_1.number == [1]
    assert chapter_1.parent_names == []
    assert section.number == [1, 1]
    assert section.parent_names == ["Chapter 1"]
    assert section.source_path == "chapter_1/section.md"


def test_unknown_item_shape_is_opaque():
    item = item_from_json({"Something": 1, "Else": 2})

    assert type(item) is BookItem
    assert item.to_json() == {"Something": 1, "Else": 2}


@pytest.mark.parametrize("data", [[], {"sections": None}, {"no_sections": []}])
def test_from_json_rejects_malformed_books(data):
    with pytest.raises(ValueError):
        Book.from_json(data)
