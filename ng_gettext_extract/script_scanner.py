"""Find gettext calls in JavaScript sources.

Recognized call shapes::

    gettext('Hello')                              # any configured marker name
    gettext('Save', undefined, 'button')          # third argument is the context
    gettextCatalog.getString('Hello', {}, 'ctx')
    gettextCatalog.getPlural(n, 'Bird', 'Birds')

Comments starting with ``/// `` right before a call (or before the nearest
enclosing statement that has leading comments) become extracted comments.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from .catalog import Catalog, Reference

logger = logging.getLogger(__name__)

JS_LANGUAGE = Language(tree_sitter_javascript.language())
CATALOG_ACCESSOR = "gettextCatalog"
DOC_COMMENT_RE = re.compile(r"^/// ")
SIMPLE_ESCAPES = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "0": "\0",
}


def node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8", errors="replace")


def unescape_js(sequence: str) -> str:
    body = sequence[1:]
    if body.startswith(("\n", "\r", "\u2028", "\u2029")):
        return ""
    if body.startswith("u{") and body.endswith("}"):
        return chr(int(body[2:-1], 16))
    if body.startswith(("u", "x")) and len(body) > 1:
        try:
            return chr(int(body[1:], 16))
        except ValueError:
            return body
    return SIMPLE_ESCAPES.get(body, body)


def string_value(node: Node) -> str:
    parts: list[str] = []
    for child in node.named_children:
        if child.type == "escape_sequence":
            parts.append(unescape_js(node_text(child)))
        else:
            parts.append(node_text(child))
    return "".join(parts)


def resolve_string(node: Node | None) -> str | None:
    """Resolve a string literal or a ``+`` chain of string literals."""
    if node is None:
        return None
    if node.type == "string":
        return string_value(node)
    if node.type == "binary_expression":
        operator = node.child_by_field_name("operator")
        if operator is None or operator.type != "+":
            return None
        left = resolve_string(node.child_by_field_name("left"))
        right = resolve_string(node.child_by_field_name("right"))
        if left is None or right is None:
            return None
        return left + right
    return None


def leading_comments(node: Node) -> list[Node]:
    comments: list[Node] = []
    sibling = node.prev_sibling
    while sibling is not None and sibling.type == "comment":
        comments.append(sibling)
        sibling = sibling.prev_sibling
    if sibling is not None:
        # a comment on the line where the previous statement ends trails that statement
        comments = [c for c in comments if c.start_point[0] != sibling.end_point[0]]
    comments.reverse()
    return comments


def walk(root: Node) -> Iterator[tuple[Node, list[Node]]]:
    """Depth-first walk yielding each node with its inherited comment block."""
    stack: list[tuple[Node, list[Node]]] = [(root, [])]
    while stack:
        node, inherited = stack.pop()
        yield node, inherited
        for child in reversed(node.children):
            stack.append((child, leading_comments(child) or inherited))


def doc_comment(comments: Iterable[Node]) -> str:
    lines: list[str] = []
    for comment in comments:
        text = node_text(comment)
        if DOC_COMMENT_RE.match(text):
            lines.append(DOC_COMMENT_RE.sub("", text, count=1))
    return ", ".join(lines)


def method_name_node(call: Node) -> Node | None:
    function = call.child_by_field_name("function")
    if function is None:
        return None
    if function.type == "identifier":
        return function
    if function.type == "member_expression":
        return function.child_by_field_name("property")
    return None


def object_name(call: Node) -> str | None:
    function = call.child_by_field_name("function")
    if function is None or function.type != "member_expression":
        return None
    target = function.child_by_field_name("object")
    if target is None:
        return None
    if target.type == "identifier":
        return node_text(target)
    if target.type == "member_expression":
        prop = target.child_by_field_name("property")
        return node_text(prop) if prop is not None else None
    return None


def call_arguments(call: Node) -> list[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return []
    return [child for child in arguments.named_children if child.type != "comment"]


def argument(arguments: list[Node], index: int) -> Node | None:
    return arguments[index] if index < len(arguments) else None


class ScriptScanner:
    def __init__(self, catalog: Catalog, marker_names: Iterable[str]) -> None:
        self.catalog = catalog
        self.marker_names = tuple(marker_names)
        self._parser = Parser(JS_LANGUAGE)

    def scan(self, filename: str, source: str, line_offset: int = 0) -> None:
        try:
            tree = self._parser.parse(source.encode("utf-8"))
        except UnicodeEncodeError:
            logger.debug("Skipping %s: source is not valid UTF-8", filename)
            return

        for node, comments in walk(tree.root_node):
            if node.type == "call_expression":
                self._scan_call(filename, node, comments, line_offset)

    def _scan_call(
        self, filename: str, node: Node, comments: list[Node], line_offset: int
    ) -> None:
        name_node = method_name_node(node)
        arguments = call_arguments(node)
        if name_node is None or not arguments:
            return

        name = node_text(name_node)
        is_accessor = object_name(node) == CATALOG_ACCESSOR
        msgid = plural = context = None
        if name in self.marker_names or (is_accessor and name == "getString"):
            msgid = resolve_string(arguments[0])
            context = resolve_string(argument(arguments, 2))
        elif is_accessor and name == "getPlural":
            msgid = resolve_string(argument(arguments, 1))
            plural = resolve_string(argument(arguments, 2))

        if not msgid:
            return

        comment = doc_comment(comments)
        reference = Reference(filename, name_node.end_point[0] + 1 + line_offset)
        self.catalog.add_string(reference, msgid, plural, comment, context)
