"""
bibref: bibliography referencing for mdbook via pandoc citeproc.

Public API:
    from bibref.config import ConverterSettings, ConfigError
    from bibref.pandoc import builtin_citeproc_support, make_transform, PandocError
    from bibref.protocol import read_book, write_book, check_version, ProtocolError
    from bibref.preprocessor import BibliographyPreprocessor
"""

__version__ = "0.1.0"
