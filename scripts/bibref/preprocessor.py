"""
The bibliography preprocessor.

Runs every chapter of a book through a `text -> text` transform (normally
pandoc with citeproc, see bibref.pandoc.make_transform) and puts the
result back in place.
"""

import sys
import time


class BibliographyPreprocessor:
    """
    Replaces each chapter's content with the transform's output.

    Chapters are processed one at a time in document order. The first
    transform error propagates, so the caller never writes a half-processed
    book.
    """

    name = "mdbook-bibfile-referencing"

    def __init__(self, transform, verbose=False):
        self.transform = transform
        self.verbose = verbose

    # ── Logging ────────────────────────────────────────────

    def log(self, msg):
        if self.verbose:
            print(msg, file=sys.stderr)

    # ── mdbook interface ───────────────────────────────────

    def supports_renderer(self, renderer):
        """Citations are plain markdown once rendered, so every renderer works."""
        return True

    def run(self, ctx, book):
        count = 0
        for chapter in book.iter_chapters():
            start = time.perf_counter()
            chapter.content = self.transform(chapter.content)
            elapsed = time.perf_counter() - start
            print(f"  ✓ {chapter.label} ({elapsed:.2f}s)", file=sys.stderr)
            count += 1

        self.log(f"  {count} chapter(s) processed")
        return book
