"""Extraction driver: routes files to a scanner and renders the catalog."""

from __future__ import annotations

import polib

from .catalog import Catalog, Reference
from .config import STRATEGIES, ExtractorOptions
from .script_scanner import ScriptScanner
from .template_scanner import TemplateScanner, mk_attr_regex, mk_interpolate_regex

__all__ = ["Extractor", "mk_attr_regex", "mk_interpolate_regex"]


class Extractor:
    def __init__(self, options: ExtractorOptions | None = None) -> None:
        self.options = options or ExtractorOptions()
        self.options.validate()
        self.catalog = Catalog(line_numbers=self.options.line_numbers)
        self.attr_regex = mk_attr_regex(self.options.start_delim, self.options.end_delim)
        self.interpolate_regex = mk_interpolate_regex(
            self.options.start_delim, self.options.end_delim
        )
        self.script_scanner = ScriptScanner(self.catalog, self.options.all_marker_names())
        self.template_scanner = TemplateScanner(
            self.catalog, self.script_scanner, self.interpolate_regex, self.attr_regex
        )

    @staticmethod
    def is_valid_strategy(strategy: str) -> bool:
        return strategy in STRATEGIES

    def is_supported_by_strategy(self, strategy: str, extension: str) -> bool:
        return self.options.extensions.get(extension) == strategy

    def add_string(
        self,
        reference: Reference | str,
        string: str,
        plural: str | None = None,
        comment: str | None = None,
        context: str | None = None,
    ) -> None:
        self.catalog.add_string(reference, string, plural, comment, context)

    def extract_html(self, filename: str, src: str) -> None:
        self.template_scanner.scan(filename, src)

    def extract_js(self, filename: str, src: str, line_number: int = 0) -> None:
        self.script_scanner.scan(filename, src, line_number)

    def parse(self, filename: str, content: str) -> None:
        extension = filename.rsplit(".", 1)[-1]
        if self.is_supported_by_strategy("html", extension):
            self.extract_html(filename, content)
        if self.is_supported_by_strategy("js", extension):
            self.extract_js(filename, content)

    def to_pofile(self) -> polib.POFile:
        return self.catalog.to_pofile(self.options.post_process)

    def to_string(self) -> str:
        return str(self.to_pofile())

    __str__ = to_string
