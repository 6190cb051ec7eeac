"""
Pandoc invocation.

Probes the installed pandoc for built-in citeproc support, builds the
command line from ConverterSettings, and pipes chapter text through it.
"""

import re
import subprocess


# First pandoc release with --citeproc; older ones need the pandoc-citeproc filter
MIN_BUILTIN_CITEPROC = (2, 11, 0)

CITEPROC_FILTER = "pandoc-citeproc"


class PandocError(Exception):
    """Raised when pandoc cannot be run or fails on a chapter."""
    pass


# ── Capability probe ───────────────────────────────────────────────────


def parse_version(line):
    """
    Parse the first line of `pandoc --version` into an int tuple.

        "pandoc 2.11.0.4"  → (2, 11, 0, 4)
        "pandoc.exe 3.1"   → (3, 1)
    """
    version = re.sub(r"^\S*pandoc(\.exe)?\s+", "", line.strip())
    match = re.match(r"(\d+(?:\.\d+)*)", version)
    if not match:
        raise PandocError(f"Failed to parse pandoc version: {version}")
    return tuple(int(part) for part in match.group(1).split("."))


def probe_version(executable="pandoc"):
    """Run `pandoc --version` and return the parsed version tuple."""
    try:
        result = subprocess.run(
            [executable, "--version"],
            capture_output=True,
            text=True,
        )
    except OSError:
        raise PandocError("Failed to call pandoc - is it installed?")

    if result.returncode != 0:
        raise PandocError(
            f"pandoc --version failed (exit {result.returncode}): {result.stderr.strip()}"
        )

    lines = (result.stdout or "").splitlines()
    if not lines:
        raise PandocError("Pandoc version error")
    return parse_version(lines[0])


def version_at_least(version, required):
    """
    Compare dotted versions with missing parts counting as zero.

        (2, 11) vs (2, 11, 0)  → equal, so True
    """
    width = max(len(version), len(required))
    padded = tuple(version) + (0,) * (width - len(version))
    return padded >= tuple(required) + (0,) * (width - len(required))


def builtin_citeproc_support(executable="pandoc"):
    """True if the installed pandoc has --citeproc built in."""
    return version_at_least(probe_version(executable), MIN_BUILTIN_CITEPROC)


def version_string(version):
    return ".".join(str(part) for part in version)


# ── Conversion ─────────────────────────────────────────────────────────


def build_command(settings):
    """Build the pandoc command for one chapter (text comes in on stdin)."""
    cmd = [
        settings.pandoc,
        f"--from={settings.from_format}",
        f"--to={settings.to_format}",
        f"--bibliography={settings.bibliography}",
        f"--csl={settings.csl}",
    ]

    if settings.builtin_citeproc:
        cmd.append("--citeproc")
    else:
        cmd.append(f"--filter={CITEPROC_FILTER}")

    if settings.link_citations:
        cmd.append("--metadata=link-citations=true")

    for f in settings.lua_filters:
        cmd.append(f"--lua-filter={f}")

    return cmd


def convert(cmd, text):
    """
    Pipe text through a pandoc command and return its stdout.

    Raises PandocError if the process cannot start, exits non-zero,
    or produces no output.
    """
    try:
        result = subprocess.run(
            cmd,
            input=text,
            capture_output=True,
            text=True,
            encoding="utf-8",
        )
    except OSError:
        raise PandocError(f"{cmd[0]} not found - is it installed?")

    if result.returncode != 0:
        msg = f"pandoc failed (exit {result.returncode})"
        if result.stderr:
            details = result.stderr.strip().splitlines()[:20]
            msg += "\n" + "\n".join(f"    {line}" for line in details)
        raise PandocError(msg)

    if result.stdout is None:
        raise PandocError("pandoc produced no output")

    return result.stdout


def make_transform(settings):
    """Return a `text -> text` function bound to one pandoc command."""
    cmd = build_command(settings)

    def transform(text):
        return convert(cmd, text)

    transform.command = cmd
    return transform
