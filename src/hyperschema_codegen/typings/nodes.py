"""Syntax tree for the TypeScript type declarations produced by the compiler.

Only the subset of TypeScript needed for type aliases and interfaces is
modelled. Nodes are immutable; rewrites build new nodes with model_copy.
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class TypeReference(Node):
    name: str  # may be qualified, e.g. "Foo.Bar"
    type_arguments: list["TypeNode"] = []


class Keyword(Node):
    name: str  # string, number, boolean, null, unknown, any, ...


class LiteralType(Node):
    text: str  # source text, quotes included for strings


class PropertySignature(Node):
    name: str
    quoted: bool = False
    optional: bool = False
    readonly: bool = False
    type: "TypeNode | None" = None
    doc: str | None = None


class IndexSignature(Node):
    parameter: str
    key_type: "TypeNode"
    type: "TypeNode"
    readonly: bool = False
    doc: str | None = None


Member = Union[PropertySignature, IndexSignature]


class TypeLiteral(Node):
    members: list[Member] = []
    trailer: str | None = None  # comments before the closing brace


class ArrayType(Node):
    element: "TypeNode"


class TupleType(Node):
    elements: list["TypeNode"] = []


class RestType(Node):
    type: "TypeNode"


class OptionalType(Node):
    type: "TypeNode"


class UnionType(Node):
    types: list["TypeNode"]


class IntersectionType(Node):
    types: list["TypeNode"]


class Parenthesized(Node):
    type: "TypeNode"


class IndexedAccess(Node):
    object: "TypeNode"
    index: "TypeNode"


class TypeOperator(Node):
    operator: Literal["keyof", "readonly", "unique"]
    type: "TypeNode"


class Conditional(Node):
    check: "TypeNode"
    extends: "TypeNode"
    true_type: "TypeNode"
    false_type: "TypeNode"


TypeNode = Union[
    TypeReference,
    Keyword,
    LiteralType,
    TypeLiteral,
    ArrayType,
    TupleType,
    RestType,
    OptionalType,
    UnionType,
    IntersectionType,
    Parenthesized,
    IndexedAccess,
    TypeOperator,
    Conditional,
]


class TypeParameter(Node):
    name: str
    constraint: TypeNode | None = None
    default: TypeNode | None = None


class Declaration(Node):
    """One top-level `type` or `interface` declaration."""

    name: str
    kind: Literal["type", "interface"] = "type"
    type_parameters: list[TypeParameter] = []
    type: TypeNode
    exported: bool = True
    doc: str | None = None


class DeclarationBatch(Node):
    declarations: list[Declaration] = []
    trailer: str | None = None  # comments after the last declaration


for _model in (
    TypeReference,
    PropertySignature,
    IndexSignature,
    TypeLiteral,
    ArrayType,
    TupleType,
    RestType,
    OptionalType,
    UnionType,
    IntersectionType,
    Parenthesized,
    IndexedAccess,
    TypeOperator,
    Conditional,
    TypeParameter,
    Declaration,
    DeclarationBatch,
):
    _model.model_rebuild()


def ref(name: str, *arguments: TypeNode) -> TypeReference:
    return TypeReference(name=name, type_arguments=list(arguments))


def string_literal(value: str) -> LiteralType:
    return LiteralType(text=f'"{value}"')
