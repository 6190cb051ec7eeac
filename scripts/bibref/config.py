"""
Converter settings: load, validate, and layer defaults for the pandoc call.

Settings come from three places, later ones winning:
    1. DEFAULTS below
    2. An optional YAML file (--config bibref.yaml)
    3. Command-line flags
"""

import os
from dataclasses import dataclass, field, replace

import yaml

from bibref.resolve import resolve_filters


# Defaults applied if missing
DEFAULTS = {
    "from": "markdown",
    "to": "markdown_strict",
    "link_citations": True,
    "pandoc": "pandoc",
    "lua_filters": [],
}


class ConfigError(Exception):
    """Raised when a required file is missing or the YAML config is invalid."""
    pass


def load_yaml(path):
    """Load and validate a settings YAML file. Returns a dict."""
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"{path} is not valid YAML: {e}")

    # An empty file is an empty mapping
    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must be a YAML mapping, got {type(data).__name__}")

    unknown = sorted(key for key in data if key not in DEFAULTS)
    if unknown:
        raise ConfigError(f"{path} has unknown fields: {', '.join(unknown)}")

    for key in ["from", "to", "pandoc"]:
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"{path}: {key} must be a string")

    if "link_citations" in data and not isinstance(data["link_citations"], bool):
        raise ConfigError(f"{path}: link_citations must be true or false")

    filters = data.get("lua_filters", [])
    if not isinstance(filters, list) or not all(isinstance(f, str) for f in filters):
        raise ConfigError(f"{path}: lua_filters must be a list")

    return data


@dataclass(frozen=True)
class ConverterSettings:
    """
    Everything needed to build one pandoc invocation per chapter.

    Usage:
        settings = ConverterSettings.build("refs.bib", "ieee.csl")
        settings = settings.with_citeproc_mode(builtin_citeproc_support())
    """

    bibliography: str
    csl: str
    from_format: str = DEFAULTS["from"]
    to_format: str = DEFAULTS["to"]
    link_citations: bool = DEFAULTS["link_citations"]
    builtin_citeproc: bool = True
    pandoc: str = DEFAULTS["pandoc"]
    lua_filters: tuple = field(default_factory=tuple)

    @classmethod
    def build(cls, bibliography, csl, config_path=None, overrides=None):
        """
        Validate input files and merge DEFAULTS, YAML and CLI overrides.

        `overrides` uses the YAML key names; None values are ignored so
        that unset CLI flags fall through to the file or the defaults.
        """
        if not os.path.exists(bibliography):
            raise ConfigError(f"Bib file not found: {bibliography}")
        if not os.path.exists(csl):
            raise ConfigError(f"CSL file not found: {csl}")

        data = dict(DEFAULTS)
        base_dir = os.getcwd()
        if config_path:
            data.update(load_yaml(config_path))
            base_dir = os.path.dirname(os.path.abspath(config_path))

        for key, value in (overrides or {}).items():
            if value is not None:
                data[key] = value

        return cls(
            bibliography=bibliography,
            csl=csl,
            from_format=data["from"],
            to_format=data["to"],
            link_citations=bool(data["link_citations"]),
            pandoc=data["pandoc"],
            lua_filters=tuple(resolve_filters(base_dir, data["lua_filters"])),
        )

    def with_citeproc_mode(self, builtin):
        """Copy with the citeproc engine set: built-in (True) or filter (False)."""
        return replace(self, builtin_citeproc=builtin)

    def summary(self):
        """Short description lines for verbose output."""
        mode = "--citeproc" if self.builtin_citeproc else "pandoc-citeproc filter"
        return [
            f"  Bib:    {self.bibliography}",
            f"  CSL:    {self.csl}",
            f"  Format: {self.from_format} -> {self.to_format}",
            f"  Engine: {mode}",
        ]
