"""Extract gettext strings from AngularJS templates and JavaScript sources."""

from .catalog import (
    NO_CONTEXT,
    Catalog,
    CatalogEntry,
    IncompatiblePluralError,
    Reference,
)
from .config import DEFAULT_EXTENSIONS, ExtractorOptions, load_options
from .expression import FilterMatch, parse_for_filters
from .extractor import Extractor, mk_attr_regex, mk_interpolate_regex

__all__ = [
    "NO_CONTEXT",
    "Catalog",
    "CatalogEntry",
    "DEFAULT_EXTENSIONS",
    "Extractor",
    "ExtractorOptions",
    "FilterMatch",
    "IncompatiblePluralError",
    "Reference",
    "load_options",
    "mk_attr_regex",
    "mk_interpolate_regex",
    "parse_for_filters",
]

__version__ = "0.1.0"
