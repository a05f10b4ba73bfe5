"""Find translatable strings in AngularJS templates.

Handled markers:

- ``<translate>Hello</translate>``
- ``<p translate translate-plural="..." translate-context="...">Hello</p>``
  (``data-`` prefixed attributes work the same way)
- ``{{ 'Hello' | translate }}`` in attribute values and text
- ``ng-bind="'Hello' | translate"`` style attribute expressions
- ``<script>`` blocks (JavaScript) and ``<script type="text/ng-template">``
  blocks (nested templates), with line numbers of the outer file
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from bs4.formatter import HTMLFormatter

from .catalog import Catalog, Reference
from .expression import parse_for_filters
from .script_scanner import ScriptScanner

TRANSLATE_TAG = "translate"
TRANSLATE_ATTRIBUTES = {"translate", "data-translate"}
NESTED_TEMPLATE_TYPES = {"text/ng-template"}
SCRIPT_TYPES = {"text/javascript", "application/javascript"}
# stands in for "&" while parsing so entities reach the catalog untouched
AMPERSAND_SENTINEL = "\uE000"
VERBATIM_FORMATTER = HTMLFormatter(entity_substitution=None, void_element_close_prefix=None)


def mk_attr_regex(start_delim: str, end_delim: str) -> re.Pattern[str]:
    """Match ``'literal' | translate`` directly inside an attribute value."""
    start = re.escape(start_delim)
    end = re.escape(end_delim)
    if start == "" and end == "":
        start = "^"
    else:
        # optional one-time binding marker, not captured
        start += r"(?:\s*::\s*)?"
    return re.compile(
        start + r"\s*('|\"|&quot;|&#39;)(.*?)\1\s*\|\s*translate\s*(" + end + r"|\|)"
    )


def mk_interpolate_regex(start_delim: str, end_delim: str) -> re.Pattern[str]:
    start = re.escape(start_delim)
    end = re.escape(end_delim)
    return re.compile(start + r"\s*(?:::)?(.*?)" + end)


NO_DELIMITER_ATTR_RE = mk_attr_regex("", "")


def protect_entities(markup: str) -> str:
    return markup.replace("&", AMPERSAND_SENTINEL)


def restore_entities(text: str) -> str:
    return text.replace(AMPERSAND_SENTINEL, "&")


def inner_html(tag: Tag) -> str:
    return restore_entities(tag.decode_contents(formatter=VERBATIM_FORMATTER))


def raw_text(tag: Tag) -> str:
    return restore_entities("".join(str(child) for child in tag.children))


def get_attr(tag: Tag, name: str) -> str | None:
    value = tag.get(name) or tag.get(f"data-{name}")
    return restore_entities(value) if value else value


def is_text(node: object) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def string_line(string: NavigableString, markup: str) -> int:
    """Line (1-based) on which a text node starts.

    Text nodes carry no position, so count back from the next tag in
    document order, or from the end of the markup when none follows.
    """
    newlines = 0
    element = string
    while element is not None:
        if isinstance(element, Tag) and element.sourceline is not None:
            return element.sourceline - newlines
        if isinstance(element, NavigableString):
            newlines += element.count("\n")
        element = element.next_element
    return markup.count("\n") + 1 - newlines


class TemplateScanner:
    def __init__(
        self,
        catalog: Catalog,
        script_scanner: ScriptScanner,
        interpolate_regex: re.Pattern[str],
        attr_regex: re.Pattern[str],
    ) -> None:
        self.catalog = catalog
        self.script_scanner = script_scanner
        self.interpolate_regex = interpolate_regex
        self.attr_regex = attr_regex

    def scan(self, filename: str, markup: str, line_offset: int = 0) -> None:
        soup = BeautifulSoup(
            protect_entities(markup), "html.parser", multi_valued_attributes=None
        )
        self._scan_text_nodes(filename, markup, soup.children, line_offset)
        for tag in soup.find_all(True):
            self._scan_element(filename, markup, tag, line_offset)

    def _scan_element(self, filename: str, markup: str, tag: Tag, line_offset: int) -> None:
        start_line = tag.sourceline or 1
        reference = Reference(filename, start_line + line_offset)

        if tag.name == "script":
            script_type = tag.get("type")
            offset = line_offset + start_line - 1
            if script_type in NESTED_TEMPLATE_TYPES:
                self.scan(filename, raw_text(tag), offset)
                return
            # HTML5 defaults the type to JavaScript
            if not script_type or script_type in SCRIPT_TYPES:
                self.script_scanner.scan(filename, raw_text(tag), offset)
                return

        plural = get_attr(tag, "translate-plural")
        comment = get_attr(tag, "translate-comment")
        context = get_attr(tag, "translate-context")

        if tag.name == TRANSLATE_TAG or TRANSLATE_ATTRIBUTES.intersection(tag.attrs):
            self.catalog.add_string(reference, inner_html(tag), plural, comment, context)
            return

        for value in tag.attrs.values():
            if not value:
                continue
            for msgid in self._attribute_strings(restore_entities(value)):
                self.catalog.add_string(reference, msgid)

        self._scan_text_nodes(filename, markup, tag.children, line_offset)

    def _attribute_strings(self, value: str) -> list[str]:
        expressions = [m.group(1) for m in self.interpolate_regex.finditer(value)]
        found = [
            match.msgid
            for expression in expressions or [value]
            for match in parse_for_filters(expression)
        ]
        if found:
            return found
        pattern = self.attr_regex if expressions else NO_DELIMITER_ATTR_RE
        return [m.group(2) for m in pattern.finditer(value)]

    def _scan_text_nodes(
        self, filename: str, markup: str, children: Iterable[object], line_offset: int
    ) -> None:
        for child in children:
            if not is_text(child):
                continue
            matches = list(self.interpolate_regex.finditer(restore_entities(child)))
            if not matches:
                continue
            reference = Reference(filename, string_line(child, markup) + line_offset)
            for match in matches:
                for found in parse_for_filters(match.group(1)):
                    self.catalog.add_string(reference, found.msgid)
