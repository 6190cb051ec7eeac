#!/usr/bin/env python3
"""
mdbook preprocessor that renders pandoc citations on every page.

Each chapter is piped through pandoc with a bibliography and a CSL style;
`[@key]` citations become rendered references and a reference list is
appended to the chapter.

Usage (book.toml):
    [preprocessor.bib]
    command = "mdbook-bibref refs.bib ieee.csl"

    mdbook-bibref refs.bib ieee.csl < input.json     Process a book
    mdbook-bibref refs.bib ieee.csl supports html    Renderer check (always ok)
    mdbook-bibref refs.bib ieee.csl --to gfm         Override output dialect

Requires: pandoc (>= 2.11, or older pandoc plus pandoc-citeproc), PyYAML
"""

import os
import sys
import argparse
import traceback

# Ensure bibref is importable from the scripts/ directory
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bibref import __version__
from bibref.config import ConverterSettings, ConfigError
from bibref.pandoc import (
    MIN_BUILTIN_CITEPROC,
    PandocError,
    builtin_citeproc_support,
    make_transform,
    version_string,
)
from bibref.preprocessor import BibliographyPreprocessor
from bibref.protocol import ProtocolError, check_version, read_book, write_book


def error(msg):
    print(f"Error: {msg}", file=sys.stderr)


# ── Preprocess command ─────────────────────────────────────────────────


def load_settings(args):
    """Validate input files, probe pandoc, and pick the citeproc engine."""
    settings = ConverterSettings.build(
        args.bib,
        args.csl,
        config_path=args.config,
        overrides={
            "from": args.from_format,
            "to": args.to_format,
            "link_citations": args.link_citations,
            "pandoc": args.pandoc,
        },
    )

    builtin = builtin_citeproc_support(settings.pandoc)
    if not builtin:
        print(
            f"  Warning: pandoc older than {version_string(MIN_BUILTIN_CITEPROC)}, "
            f"using the pandoc-citeproc filter",
            file=sys.stderr,
        )
    return settings.with_citeproc_mode(builtin)


def cmd_preprocess(args, stdin=None, stdout=None):
    """Read the book from stdin, render citations, write it to stdout."""
    try:
        settings = load_settings(args)
    except (ConfigError, PandocError) as e:
        error(e)
        return 1

    transform = make_transform(settings)
    preprocessor = BibliographyPreprocessor(transform, verbose=args.verbose)
    for line in settings.summary():
        preprocessor.log(line)
    preprocessor.log(f"  Command: {' '.join(transform.command)}")

    try:
        ctx, book = read_book(stdin or sys.stdin)
        check_version(ctx, preprocessor.name)
        book = preprocessor.run(ctx, book)
    except (ProtocolError, PandocError) as e:
        error(e)
        return 1

    write_book(book, stdout or sys.stdout)
    return 0


# ── Supports command ───────────────────────────────────────────────────


def cmd_supports(args, stdin=None, stdout=None):
    preprocessor = BibliographyPreprocessor(transform=None)
    return 0 if preprocessor.supports_renderer(args.renderer) else 1


# ── Argument Parser ────────────────────────────────────────────────────


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mdbook-bibref",
        description="An mdbook preprocessor to add bibfile referencing to each page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s refs.bib ieee.csl                     Run as a preprocessor
  %(prog)s refs.bib ieee.csl --no-link-citations Plain-text citations
  %(prog)s refs.bib ieee.csl --config bib.yaml   Settings from YAML
  %(prog)s refs.bib ieee.csl supports html       Renderer check
        """,
    )

    parser.add_argument("bib", help="Bibliography file (.bib, .json, .yaml, ...)")
    parser.add_argument("csl", help="CSL citation style file")

    opts = parser.add_argument_group("options")
    opts.add_argument(
        "--no-link-citations",
        dest="link_citations",
        action="store_const",
        const=False,
        default=None,
        help="Don't link citations to the reference list",
    )
    opts.add_argument("--from", dest="from_format", help="Input markdown dialect")
    opts.add_argument("--to", dest="to_format", help="Output markdown dialect")
    opts.add_argument("--config", help="YAML settings file")
    opts.add_argument("--pandoc", help="pandoc executable (default: pandoc on PATH)")
    opts.add_argument("--verbose", "-v", action="store_true")
    opts.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command")

    # ── supports ───────────────────────────────────────────
    sup_p = sub.add_parser(
        "supports", help="Check whether a renderer is supported by this preprocessor"
    )
    sup_p.add_argument("renderer")

    return parser


# ── Main ───────────────────────────────────────────────────────────────


def supports_renderer_arg(argv):
    """The renderer name if argv ends with `supports <renderer>`, else None."""
    if len(argv) >= 2 and argv[-2] == "supports":
        return argv[-1]
    return None


def main(argv=None, stdin=None, stdout=None):
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)

    # mdbook appends "supports <renderer>" to the configured command, which
    # may hold any mix of options and positionals (or none) in front of it.
    renderer = supports_renderer_arg(argv)
    if renderer is not None:
        return cmd_supports(argparse.Namespace(renderer=renderer))

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors, 0 after --help/--version
        return 1 if e.code else 0

    dispatch = {
        None: cmd_preprocess,
        "supports": cmd_supports,
    }
    return dispatch[args.command](args, stdin=stdin, stdout=stdout)


def run():
    # stdin/stdout carry JSON; mdbook always speaks UTF-8
    for stream in (sys.stdin, sys.stdout):
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(encoding="utf-8")
    if hasattr(sys.stderr, "reconfigure"):
        sys.stderr.reconfigure(errors="backslashreplace")

    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        log_path = "bibref_error.log"
        with open(log_path, "w") as f:
            traceback.print_exc(file=f)
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        print(f"Full traceback written to {log_path}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
