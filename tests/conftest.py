import copy
import json
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent
SCRIPTS_DIR = PROJECT_ROOT / "scripts"
if str(SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_DIR))

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def chapter(name, content, path=None, sub_items=None, number=None):
    return {
        "Chapter": {
            "name": name,
            "content": content,
            "number": number,
            "sub_items": sub_items or [],
            "path": path,
            "source_path": path,
            "parent_names": [],
        }
    }


SAMPLE_BOOK = {
    "sections": [
        chapter("Introduction", "# Introduction\n", path="intro.md"),
        {"PartTitle": "Part One"},
        chapter(
            "Chapter 1",
            "See [@smith2020example, p. 22] for details.\n",
            path="chapter_1.md",
            number=[1],
            sub_items=[
                chapter("Section 1.1", "Nested text.\n", path="chapter_1/section.md", number=[1, 1]),
            ],
        ),
        "Separator",
        chapter("Draft", "", number=[2]),
    ],
    "__non_exhaustive": None,
}

SAMPLE_CONTEXT = {
    "root": "/tmp/book",
    "config": {
        "book": {"authors": [], "language": "en", "src": "src"},
        "preprocessor": {"bib": {"command": "mdbook-bibref refs.bib numeric.csl"}},
    },
    "renderer": "html",
    "mdbook_version": "0.4.10",
}


@pytest.fixture
def book_data():
    return copy.deepcopy(SAMPLE_BOOK)


@pytest.fixture
def context_data():
    return copy.deepcopy(SAMPLE_CONTEXT)


@pytest.fixture
def input_json(context_data, book_data):
    return json.dumps([context_data, book_data])


@pytest.fixture
def bib_file():
    return str(FIXTURES / "refs.bib")


@pytest.fixture
def csl_file():
    return str(FIXTURES / "numeric.csl")
