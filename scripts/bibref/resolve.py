"""
Path resolution for files named in the settings YAML.
"""

import os
import sys


def resolve_artifact(base_dir, filename):
    """
    Resolve a filename to its full path.

    Search order (first match wins):
        1. base_dir/           (directory of the YAML config)
        2. working directory   (mdbook runs preprocessors from the book root)

    Absolute paths are used as-is if they exist.

    Returns: absolute path or None.
    """
    if not filename:
        return None

    # os.path.join drops base_dir when filename is absolute
    path = os.path.join(base_dir, filename)
    if os.path.exists(path):
        return os.path.abspath(path)

    if os.path.exists(filename):
        return os.path.abspath(filename)

    return None


def resolve_filters(base_dir, filter_names):
    """Resolve a list of Lua filter filenames to paths. Warns on missing."""
    filters = []
    for name in (filter_names or []):
        path = resolve_artifact(base_dir, name)
        if path:
            filters.append(path)
        else:
            print(f"  Warning: lua filter '{name}' not found", file=sys.stderr)
    return filters
