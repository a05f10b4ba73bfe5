"""Parser for the AngularJS expression language used in templates.

Only the subset needed to find ``'literal' | translate`` pipelines is
supported: literals, identifiers, member access, calls, unary and binary
operators, ternaries, array and object literals, assignments and filters.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

logger = logging.getLogger(__name__)

QUOTE_ENTITY_RE = re.compile(r"&quot;|&#39;")
TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    |(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    |(?P<ident>[A-Za-z_$][\w$]*)
    |(?P<operator>===|!==|==|!=|<=|>=|&&|\|\||[-+*/%<>!=|:?,.;()\[\]{}])
    """,
    re.VERBOSE | re.DOTALL,
)
ESCAPE_RE = re.compile(r"\\(u[0-9A-Fa-f]{4}|.)", re.DOTALL)
SIMPLE_ESCAPES = {"n": "\n", "f": "\f", "r": "\r", "t": "\t", "v": "\v"}
CONSTANTS = {"true": True, "false": False, "null": None, "undefined": None}

EQUALITY_OPERATORS = ("==", "!=", "===", "!==")
RELATIONAL_OPERATORS = ("<", ">", "<=", ">=")
ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/", "%")
BINARY_PRECEDENCE = (
    EQUALITY_OPERATORS,
    RELATIONAL_OPERATORS,
    ADDITIVE_OPERATORS,
    MULTIPLICATIVE_OPERATORS,
)
UNARY_OPERATORS = ("+", "-", "!")


class ExpressionSyntaxError(ValueError):
    pass


class NodeKind(Enum):
    PROGRAM = "Program"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    LITERAL = "Literal"
    IDENTIFIER = "Identifier"
    ARRAY = "ArrayExpression"
    OBJECT = "ObjectExpression"
    PROPERTY = "Property"
    MEMBER = "MemberExpression"
    CALL = "CallExpression"
    UNARY = "UnaryExpression"
    BINARY = "BinaryExpression"
    LOGICAL = "LogicalExpression"
    CONDITIONAL = "ConditionalExpression"
    ASSIGNMENT = "AssignmentExpression"


@dataclass
class Literal:
    value: object
    kind: ClassVar[NodeKind] = NodeKind.LITERAL


@dataclass
class Identifier:
    name: str
    kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER


@dataclass
class ArrayExpression:
    elements: list[Node]
    kind: ClassVar[NodeKind] = NodeKind.ARRAY


@dataclass
class Property:
    key: Node
    value: Node
    computed: bool = False
    kind: ClassVar[NodeKind] = NodeKind.PROPERTY


@dataclass
class ObjectExpression:
    properties: list[Property]
    kind: ClassVar[NodeKind] = NodeKind.OBJECT


@dataclass
class MemberExpression:
    object: Node
    property: Node
    computed: bool = False
    kind: ClassVar[NodeKind] = NodeKind.MEMBER


@dataclass
class CallExpression:
    callee: Node
    arguments: list[Node]
    filter: bool = False
    kind: ClassVar[NodeKind] = NodeKind.CALL


@dataclass
class UnaryExpression:
    operator: str
    argument: Node
    kind: ClassVar[NodeKind] = NodeKind.UNARY


@dataclass
class BinaryExpression:
    operator: str
    left: Node
    right: Node
    kind: ClassVar[NodeKind] = NodeKind.BINARY


@dataclass
class LogicalExpression:
    operator: str
    left: Node
    right: Node
    kind: ClassVar[NodeKind] = NodeKind.LOGICAL


@dataclass
class ConditionalExpression:
    test: Node
    consequent: Node
    alternate: Node
    kind: ClassVar[NodeKind] = NodeKind.CONDITIONAL


@dataclass
class AssignmentExpression:
    left: Node
    right: Node
    kind: ClassVar[NodeKind] = NodeKind.ASSIGNMENT


@dataclass
class ExpressionStatement:
    expression: Node
    kind: ClassVar[NodeKind] = NodeKind.EXPRESSION_STATEMENT


@dataclass
class Program:
    body: list[ExpressionStatement] = field(default_factory=list)
    kind: ClassVar[NodeKind] = NodeKind.PROGRAM


Node = Union[
    Literal,
    Identifier,
    ArrayExpression,
    ObjectExpression,
    Property,
    MemberExpression,
    CallExpression,
    UnaryExpression,
    BinaryExpression,
    LogicalExpression,
    ConditionalExpression,
    AssignmentExpression,
    ExpressionStatement,
    Program,
]


@dataclass(frozen=True)
class Token:
    type: str
    text: str
    index: int
    value: object = None


@dataclass(frozen=True)
class FilterMatch:
    msgid: str


def unescape_string(body: str) -> str:
    def repl(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape.startswith("u") and len(escape) == 5:
            return chr(int(escape[1:], 16))
        return SIMPLE_ESCAPES.get(escape, escape)

    return ESCAPE_RE.sub(repl, body)


def tokenize(text: str) -> list[Token]:
    tokens: list[Token] = []
    index = 0
    while index < len(text):
        match = TOKEN_RE.match(text, index)
        if match is None:
            raise ExpressionSyntaxError(
                f"Unexpected character {text[index]!r} at column {index}"
            )
        kind = match.lastgroup or ""
        raw = match.group(0)
        if kind == "number":
            tokens.append(Token("number", raw, index, float(raw)))
        elif kind == "string":
            tokens.append(Token("string", raw, index, unescape_string(raw[1:-1])))
        elif kind in ("ident", "operator"):
            tokens.append(Token(kind, raw, index))
        index = match.end()
    return tokens


class ExpressionParser:
    """Recursive descent parser producing the AST defined above."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def parse(self) -> Program:
        program = Program()
        while True:
            if self._peek() is not None and not self._peek_operator("}", ")", ";", "]"):
                program.body.append(ExpressionStatement(self._filter_chain()))
            if not self._expect(";"):
                break
        token = self._peek()
        if token is not None:
            raise self._error(f"Unexpected token {token.text!r}", token)
        return program

    def _peek(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _peek_operator(self, *operators: str) -> bool:
        token = self._peek()
        return token is not None and token.type == "operator" and token.text in operators

    def _expect(self, *operators: str) -> Token | None:
        if self._peek_operator(*operators):
            token = self.tokens[self.pos]
            self.pos += 1
            return token
        return None

    def _consume(self, operator: str) -> Token:
        token = self._expect(operator)
        if token is None:
            raise self._error(f"Expected {operator!r}", self._peek())
        return token

    def _error(self, message: str, token: Token | None) -> ExpressionSyntaxError:
        where = f"column {token.index}" if token else "end of expression"
        return ExpressionSyntaxError(f"{message} at {where} in {self.text!r}")

    def _filter_chain(self) -> Node:
        left = self._expression()
        while self._expect("|"):
            left = self._filter(left)
        return left

    def _filter(self, base: Node) -> CallExpression:
        token = self._peek()
        if token is None or token.type != "ident":
            raise self._error("Expected filter name", token)
        self.pos += 1
        arguments = [base]
        while self._expect(":"):
            arguments.append(self._expression())
        return CallExpression(Identifier(token.text), arguments, filter=True)

    def _expression(self) -> Node:
        return self._assignment()

    def _assignment(self) -> Node:
        result = self._ternary()
        if self._expect("="):
            result = AssignmentExpression(result, self._assignment())
        return result

    def _ternary(self) -> Node:
        test = self._logical_or()
        if self._expect("?"):
            consequent = self._expression()
            self._consume(":")
            alternate = self._expression()
            return ConditionalExpression(test, consequent, alternate)
        return test

    def _logical_or(self) -> Node:
        left = self._logical_and()
        while self._expect("||"):
            left = LogicalExpression("||", left, self._logical_and())
        return left

    def _logical_and(self) -> Node:
        left = self._binary(0)
        while self._expect("&&"):
            left = LogicalExpression("&&", left, self._binary(0))
        return left

    def _binary(self, level: int) -> Node:
        # equality, relational, additive, multiplicative; all left-associative
        if level == len(BINARY_PRECEDENCE):
            return self._unary()
        left = self._binary(level + 1)
        while True:
            token = self._expect(*BINARY_PRECEDENCE[level])
            if token is None:
                return left
            left = BinaryExpression(token.text, left, self._binary(level + 1))

    def _unary(self) -> Node:
        token = self._expect(*UNARY_OPERATORS)
        if token is not None:
            return UnaryExpression(token.text, self._unary())
        return self._primary()

    def _primary(self) -> Node:
        primary: Node
        if self._expect("("):
            primary = self._filter_chain()
            self._consume(")")
        elif self._expect("["):
            primary = self._array()
        elif self._expect("{"):
            primary = self._object()
        else:
            token = self._peek()
            if token is None:
                raise self._error("Unexpected end of expression", token)
            self.pos += 1
            if token.type in ("string", "number"):
                primary = Literal(token.value)
            elif token.type == "ident" and token.text in CONSTANTS:
                primary = Literal(CONSTANTS[token.text])
            elif token.type == "ident":
                primary = Identifier(token.text)
            else:
                raise self._error(f"Unexpected token {token.text!r}", token)

        while True:
            if self._expect("("):
                primary = CallExpression(primary, self._arguments())
            elif self._expect("["):
                primary = MemberExpression(primary, self._expression(), computed=True)
                self._consume("]")
            elif self._expect("."):
                token = self._peek()
                if token is None or token.type != "ident":
                    raise self._error("Expected property name", token)
                self.pos += 1
                primary = MemberExpression(primary, Identifier(token.text))
            else:
                return primary

    def _arguments(self) -> list[Node]:
        arguments: list[Node] = []
        if not self._peek_operator(")"):
            arguments.append(self._filter_chain())
            while self._expect(","):
                arguments.append(self._filter_chain())
        self._consume(")")
        return arguments

    def _array(self) -> ArrayExpression:
        elements: list[Node] = []
        while not self._peek_operator("]"):
            elements.append(self._expression())
            if not self._expect(","):
                break
        self._consume("]")
        return ArrayExpression(elements)

    def _object(self) -> ObjectExpression:
        properties: list[Property] = []
        while not self._peek_operator("}"):
            properties.append(self._property())
            if not self._expect(","):
                break
        self._consume("}")
        return ObjectExpression(properties)

    def _property(self) -> Property:
        if self._expect("["):
            key = self._expression()
            self._consume("]")
            self._consume(":")
            return Property(key, self._expression(), computed=True)
        token = self._peek()
        if token is None or token.type not in ("ident", "string", "number"):
            raise self._error("Invalid object key", token)
        self.pos += 1
        if token.type == "ident":
            key: Node = Identifier(token.text)
        else:
            key = Literal(token.value)
        if self._expect(":"):
            return Property(key, self._expression())
        if token.type != "ident":
            raise self._error("Expected ':' after object key", self._peek())
        return Property(key, Identifier(token.text))


class TranslateFilterCollector:
    """Collect literals piped into the ``translate`` filter."""

    def __init__(self) -> None:
        self.translatables: list[FilterMatch] = []
        self._handlers = {
            NodeKind.PROGRAM: self._visit_program,
            NodeKind.EXPRESSION_STATEMENT: self._visit_expression_statement,
            NodeKind.CALL: self._visit_call,
            NodeKind.OBJECT: self._visit_object,
            NodeKind.PROPERTY: self._visit_property,
            NodeKind.CONDITIONAL: self._visit_conditional,
        }

    def visit(self, node: Node) -> None:
        handler = self._handlers.get(node.kind)
        if handler is not None:
            handler(node)

    def visit_all(self, nodes: list) -> None:
        for node in nodes:
            self.visit(node)

    def _visit_program(self, node: Program) -> None:
        self.visit_all(node.body)

    def _visit_expression_statement(self, node: ExpressionStatement) -> None:
        self.visit(node.expression)

    def _visit_call(self, node: CallExpression) -> None:
        callee = node.callee
        if node.filter and isinstance(callee, Identifier) and callee.name == "translate":
            self._collect_msgid(node.arguments[0])
        self.visit_all(node.arguments)

    def _visit_object(self, node: ObjectExpression) -> None:
        self.visit_all(node.properties)

    def _visit_property(self, node: Property) -> None:
        self.visit(node.value)

    def _visit_conditional(self, node: ConditionalExpression) -> None:
        self.visit(node.consequent)
        self.visit(node.alternate)

    def _collect_msgid(self, argument: Node) -> None:
        if not isinstance(argument, Literal) or not isinstance(argument.value, str):
            logger.warning("Can only extract literals, skipping %s", argument.kind.value)
            return
        self.translatables.append(FilterMatch(msgid=argument.value))


def parse_expression(text: str) -> Program:
    return ExpressionParser(text).parse()


def parse_for_filters(text: str) -> list[FilterMatch]:
    text = QUOTE_ENTITY_RE.sub('"', text)
    try:
        program = parse_expression(text)
    except ExpressionSyntaxError:
        logger.debug("Could not parse expression %r", text)
        return []
    collector = TranslateFilterCollector()
    collector.visit(program)
    return collector.translatables
