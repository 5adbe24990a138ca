"""Reader for TypeScript declaration source.

Parses the output of the schema-to-declarations compiler: a sequence of
(optionally exported) `type` aliases and `interface`s built from type
references, keywords, literals, object literals, arrays, tuples, unions,
intersections, indexed access and conditional types. Comments directly
before a declaration or an object member are kept as its `doc`, those
before the closing brace of an object literal as its `trailer`.
"""

import re
from dataclasses import dataclass, field
from typing import NoReturn

from hyperschema_codegen.errors import DeclarationSyntaxError
from hyperschema_codegen.typings.nodes import (
    ArrayType,
    Conditional,
    Declaration,
    DeclarationBatch,
    IndexedAccess,
    IndexSignature,
    IntersectionType,
    Keyword,
    LiteralType,
    OptionalType,
    Parenthesized,
    PropertySignature,
    RestType,
    TupleType,
    TypeLiteral,
    TypeNode,
    TypeOperator,
    TypeParameter,
    TypeReference,
    UnionType,
)

KEYWORDS = {
    "any",
    "bigint",
    "boolean",
    "never",
    "null",
    "number",
    "object",
    "string",
    "symbol",
    "undefined",
    "unknown",
    "void",
    "this",
}

TYPE_OPERATORS = {"keyof", "readonly", "unique"}

TOKEN_PATTERN = re.compile(
    r"""
    (?P<whitespace>\s+)
  | (?P<comment>/\*.*?\*/|//[^\n]*)
  | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
  | (?P<number>\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
  | (?P<ident>[A-Za-z_$][A-Za-z0-9_$]*)
  | (?P<punct>\.\.\.|[{}\[\]()<>,;:?|&=.\-])
    """,
    re.VERBOSE | re.DOTALL,
)


@dataclass
class Token:
    kind: str  # ident / string / number / punct / eof
    text: str
    line: int
    column: int
    comments: list[str] = field(default_factory=list)
    newline_before: bool = False


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    comments: list[str] = []
    newline_before = False
    line, line_start, pos = 1, 0, 0

    while pos < len(source):
        match = TOKEN_PATTERN.match(source, pos)
        if match is None:
            raise DeclarationSyntaxError(
                f"Unexpected character {source[pos]!r}", line, pos - line_start + 1
            )
        kind = match.lastgroup
        text = match.group()
        if kind == "comment":
            comments.append(text)
        elif kind != "whitespace":
            tokens.append(Token(kind, text, line, pos - line_start + 1, comments, newline_before))
            comments = []
            newline_before = False

        newlines = text.count("\n")
        if newlines:
            newline_before = True
            line += newlines
            line_start = match.start() + text.rindex("\n") + 1
        pos = match.end()

    tokens.append(Token("eof", "", line, pos - line_start + 1, comments, newline_before))
    return tokens


def _join_comments(comments: list[str]) -> str | None:
    return "\n".join(comments) if comments else None


class DeclarationReader:
    def __init__(self, source: str):
        self.tokens = tokenize(source)
        self.index = 0

    # -- token helpers --

    def peek(self, offset: int = 0) -> Token:
        return self.tokens[min(self.index + offset, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.peek()
        self.index += 1
        return token

    def at(self, text: str, offset: int = 0) -> bool:
        token = self.peek(offset)
        return token.kind in ("punct", "ident") and token.text == text

    def accept(self, text: str) -> bool:
        if self.at(text):
            self.index += 1
            return True
        return False

    def expect(self, text: str) -> Token:
        if not self.at(text):
            self.fail(f"Expected {text!r}")
        return self.advance()

    def expect_ident(self) -> str:
        if self.peek().kind != "ident":
            self.fail("Expected an identifier")
        return self.advance().text

    def fail(self, message: str) -> NoReturn:
        token = self.peek()
        found = token.text or "end of input"
        raise DeclarationSyntaxError(f"{message}, found {found!r}", token.line, token.column)

    # -- declarations --

    def read_batch(self) -> DeclarationBatch:
        declarations = []
        while self.peek().kind != "eof":
            declarations.append(self.read_declaration())
        return DeclarationBatch(
            declarations=declarations,
            trailer=_join_comments(self.peek().comments),
        )

    def read_declaration(self) -> Declaration:
        doc = _join_comments(self.peek().comments)
        exported = self.accept("export")
        self.accept("declare")

        if self.accept("type"):
            name = self.expect_ident()
            type_parameters = self.read_type_parameters()
            self.expect("=")
            body = self.read_type()
            self.accept(";")
            kind = "type"
        elif self.accept("interface"):
            name = self.expect_ident()
            type_parameters = self.read_type_parameters()
            if self.at("extends"):
                self.fail("Interface inheritance is not supported")
            body = self.read_type_literal()
            self.accept(";")
            kind = "interface"
        else:
            self.fail("Expected a type or interface declaration")

        return Declaration(
            name=name,
            kind=kind,
            type_parameters=type_parameters,
            type=body,
            exported=exported,
            doc=doc,
        )

    def read_type_parameters(self) -> list[TypeParameter]:
        parameters: list[TypeParameter] = []
        if not self.accept("<"):
            return parameters
        while True:
            name = self.expect_ident()
            constraint = self.read_type() if self.accept("extends") else None
            default = self.read_type() if self.accept("=") else None
            parameters.append(TypeParameter(name=name, constraint=constraint, default=default))
            if not self.accept(","):
                break
        self.expect(">")
        return parameters

    # -- types --

    def read_type(self) -> TypeNode:
        check = self.read_union()
        if not self.accept("extends"):
            return check
        extends = self.read_union()
        self.expect("?")
        true_type = self.read_type()
        self.expect(":")
        false_type = self.read_type()
        return Conditional(check=check, extends=extends, true_type=true_type, false_type=false_type)

    def read_union(self) -> TypeNode:
        self.accept("|")
        types = [self.read_intersection()]
        while self.accept("|"):
            types.append(self.read_intersection())
        return types[0] if len(types) == 1 else UnionType(types=types)

    def read_intersection(self) -> TypeNode:
        self.accept("&")
        types = [self.read_operator()]
        while self.accept("&"):
            types.append(self.read_operator())
        return types[0] if len(types) == 1 else IntersectionType(types=types)

    def read_operator(self) -> TypeNode:
        token = self.peek()
        if token.kind == "ident" and token.text in TYPE_OPERATORS and self._starts_type(1):
            self.advance()
            return TypeOperator(operator=token.text, type=self.read_operator())
        return self.read_postfix()

    def _starts_type(self, offset: int) -> bool:
        token = self.peek(offset)
        return token.kind in ("ident", "string", "number") or token.text in ("{", "[", "(", "-")

    def read_postfix(self) -> TypeNode:
        node = self.read_primary()
        while self.at("[") and not self.peek().newline_before:
            self.advance()
            if self.accept("]"):
                node = ArrayType(element=node)
            else:
                index = self.read_type()
                self.expect("]")
                node = IndexedAccess(object=node, index=index)
        return node

    def read_primary(self) -> TypeNode:
        token = self.peek()

        if self.accept("("):
            inner = self.read_type()
            self.expect(")")
            return Parenthesized(type=inner)

        if token.text == "{" and token.kind == "punct":
            return self.read_type_literal()

        if self.accept("["):
            return self.read_tuple()

        if token.kind in ("string", "number"):
            self.advance()
            return LiteralType(text=token.text)

        if self.accept("-"):
            number = self.advance()
            if number.kind != "number":
                self.fail("Expected a number")
            return LiteralType(text=f"-{number.text}")

        if token.kind == "ident":
            self.advance()
            if token.text in ("true", "false"):
                return LiteralType(text=token.text)
            if token.text in KEYWORDS:
                return Keyword(name=token.text)
            name = token.text
            while self.at(".") and self.peek(1).kind == "ident":
                self.advance()
                name += "." + self.advance().text
            arguments: list[TypeNode] = []
            if self.at("<") and not self.peek().newline_before:
                self.advance()
                arguments.append(self.read_type())
                while self.accept(","):
                    arguments.append(self.read_type())
                self.expect(">")
            return TypeReference(name=name, type_arguments=arguments)

        self.fail("Expected a type")

    def read_tuple(self) -> TupleType:
        elements: list[TypeNode] = []
        while not self.accept("]"):
            if self.accept("..."):
                elements.append(RestType(type=self.read_type()))
            else:
                element = self.read_type()
                if self.accept("?"):
                    element = OptionalType(type=element)
                elements.append(element)
            if not self.accept(","):
                self.expect("]")
                break
        return TupleType(elements=elements)

    def read_type_literal(self) -> TypeLiteral:
        self.expect("{")
        members = []
        while not self.at("}"):
            members.append(self.read_member())
            if not (self.accept(";") or self.accept(",")) and not self.at("}"):
                if not self.peek().newline_before:
                    self.fail("Expected ';' between members")
        trailer = _join_comments(self.advance().comments)
        return TypeLiteral(members=members, trailer=trailer)

    def _is_index_signature(self) -> bool:
        return (
            self.at("[")
            and self.peek(1).kind == "ident"
            and self.at(":", 2)
        )

    def read_member(self) -> PropertySignature | IndexSignature:
        doc = _join_comments(self.peek().comments)
        readonly = False
        if self.at("readonly") and not (self.at(":", 1) or self.at("?", 1)):
            self.advance()
            readonly = True

        if self._is_index_signature():
            self.expect("[")
            parameter = self.expect_ident()
            self.expect(":")
            key_type = self.read_type()
            self.expect("]")
            self.expect(":")
            return IndexSignature(
                parameter=parameter,
                key_type=key_type,
                type=self.read_type(),
                readonly=readonly,
                doc=doc,
            )

        token = self.advance()
        if token.kind == "string":
            name, quoted = token.text[1:-1], True
        elif token.kind in ("ident", "number"):
            name, quoted = token.text, False
        else:
            self.index -= 1
            self.fail("Expected a property name")
        optional = self.accept("?")
        self.expect(":")
        return PropertySignature(
            name=name,
            quoted=quoted,
            optional=optional,
            readonly=readonly,
            type=self.read_type(),
            doc=doc,
        )


def read_declarations(source: str) -> DeclarationBatch:
    """Parse declaration source into a DeclarationBatch."""
    return DeclarationReader(source).read_batch()
