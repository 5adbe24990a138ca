"""Printer turning declaration syntax trees back into TypeScript source."""

import re

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

INDENT = "    "

IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Binding strength, higher binds tighter
CONDITIONAL, UNION, INTERSECTION, OPERATOR, POSTFIX, PRIMARY = range(6)


def _precedence(node: TypeNode) -> int:
    if isinstance(node, Conditional):
        return CONDITIONAL
    if isinstance(node, UnionType):
        return UNION
    if isinstance(node, IntersectionType):
        return INTERSECTION
    if isinstance(node, TypeOperator):
        return OPERATOR
    if isinstance(node, (ArrayType, IndexedAccess)):
        return POSTFIX
    return PRIMARY


def format_comment(text: str, indent: str) -> str:
    lines = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith("*"):
            line = " " + line
        lines.append(indent + line)
    return "\n".join(lines)


def print_type(node: TypeNode, level: int = 0) -> str:
    """Render a type expression; `level` is the indentation of the enclosing line."""

    def operand(child: TypeNode, minimum: int) -> str:
        text = print_type(child, level)
        return f"({text})" if _precedence(child) < minimum else text

    if isinstance(node, TypeReference):
        if not node.type_arguments:
            return node.name
        arguments = ", ".join(print_type(a, level) for a in node.type_arguments)
        return f"{node.name}<{arguments}>"
    if isinstance(node, Keyword):
        return node.name
    if isinstance(node, LiteralType):
        return node.text
    if isinstance(node, TypeLiteral):
        return print_type_literal(node, level)
    if isinstance(node, ArrayType):
        return f"{operand(node.element, POSTFIX)}[]"
    if isinstance(node, TupleType):
        return "[" + ", ".join(print_type(e, level) for e in node.elements) + "]"
    if isinstance(node, RestType):
        return f"...{operand(node.type, POSTFIX)}"
    if isinstance(node, OptionalType):
        return f"{operand(node.type, POSTFIX)}?"
    if isinstance(node, UnionType):
        return " | ".join(operand(t, UNION) for t in node.types)
    if isinstance(node, IntersectionType):
        return " & ".join(operand(t, INTERSECTION) for t in node.types)
    if isinstance(node, Parenthesized):
        return f"({print_type(node.type, level)})"
    if isinstance(node, IndexedAccess):
        return f"{operand(node.object, POSTFIX)}[{print_type(node.index, level)}]"
    if isinstance(node, TypeOperator):
        return f"{node.operator} {operand(node.type, OPERATOR)}"
    if isinstance(node, Conditional):
        return (
            f"{operand(node.check, UNION)} extends {operand(node.extends, UNION)}"
            f" ? {print_type(node.true_type, level)} : {print_type(node.false_type, level)}"
        )
    raise TypeError(f"Cannot print {type(node).__name__}")


def _property_name(member: PropertySignature) -> str:
    if member.quoted or not IDENTIFIER.match(member.name):
        return f'"{member.name}"'
    return member.name


def print_member(member: PropertySignature | IndexSignature, level: int) -> str:
    indent = INDENT * level
    prefix = "readonly " if member.readonly else ""
    if isinstance(member, IndexSignature):
        line = (
            f"{indent}{prefix}[{member.parameter}: {print_type(member.key_type, level)}]: "
            f"{print_type(member.type, level)};"
        )
    else:
        optional = "?" if member.optional else ""
        value = print_type(member.type, level) if member.type is not None else "any"
        line = f"{indent}{prefix}{_property_name(member)}{optional}: {value};"
    if member.doc:
        return format_comment(member.doc, indent) + "\n" + line
    return line


def print_type_literal(node: TypeLiteral, level: int = 0) -> str:
    if not node.members and not node.trailer:
        return "{}"
    lines = [print_member(m, level + 1) for m in node.members]
    if node.trailer:
        lines.append(format_comment(node.trailer, INDENT * (level + 1)))
    return "{\n" + "\n".join(lines) + "\n" + INDENT * level + "}"


def print_type_parameters(parameters: list[TypeParameter]) -> str:
    if not parameters:
        return ""
    rendered = []
    for parameter in parameters:
        text = parameter.name
        if parameter.constraint is not None:
            text += f" extends {print_type(parameter.constraint)}"
        if parameter.default is not None:
            text += f" = {print_type(parameter.default)}"
        rendered.append(text)
    return "<" + ", ".join(rendered) + ">"


def print_declaration(declaration: Declaration) -> str:
    export = "export " if declaration.exported else ""
    parameters = print_type_parameters(declaration.type_parameters)
    if declaration.kind == "interface" and isinstance(declaration.type, TypeLiteral):
        text = f"{export}interface {declaration.name}{parameters} {print_type_literal(declaration.type)}"
    else:
        text = f"{export}type {declaration.name}{parameters} = {print_type(declaration.type)};"
    if declaration.doc:
        return format_comment(declaration.doc, "") + "\n" + text
    return text


def print_declarations(batch: DeclarationBatch | list[Declaration]) -> str:
    """Render a batch of declarations, one per line group, ending with a newline."""
    if isinstance(batch, DeclarationBatch):
        declarations, trailer = batch.declarations, batch.trailer
    else:
        declarations, trailer = batch, None
    parts = [print_declaration(d) for d in declarations]
    if trailer:
        parts.append(format_comment(trailer, ""))
    return "\n".join(parts) + "\n"
