import pytest

from hyperschema_codegen.errors import DeclarationSyntaxError
from hyperschema_codegen.typings.nodes import (
    ArrayType,
    Conditional,
    IndexedAccess,
    IndexSignature,
    IntersectionType,
    Keyword,
    LiteralType,
    Parenthesized,
    PropertySignature,
    TupleType,
    TypeLiteral,
    TypeOperator,
    TypeReference,
    UnionType,
    ref,
    string_literal,
)
from hyperschema_codegen.typings.printer import (
    print_declaration,
    print_declarations,
    print_type,
)
from hyperschema_codegen.typings.reader import read_declarations, tokenize


def _type_of(source: str):
    return read_declarations(f"type T = {source};").declarations[0].type


class TestTokenize:
    def test_comments_attach_to_next_token(self):
        tokens = tokenize("/** doc */\ntype A = string;")
        assert tokens[0].text == "type"
        assert tokens[0].comments == ["/** doc */"]
        assert tokens[0].newline_before is True

    def test_positions(self):
        tokens = tokenize("type A =\n  B;")
        assert (tokens[3].text, tokens[3].line, tokens[3].column) == ("B", 2, 3)

    def test_unexpected_character(self):
        with pytest.raises(DeclarationSyntaxError, match="line 1, column 10"):
            tokenize("type A = #;")


class TestReadTypes:
    def test_union_and_keywords(self):
        node = _type_of("string | null")
        assert node == UnionType(types=[Keyword(name="string"), Keyword(name="null")])

    def test_leading_separator(self):
        node = _type_of("\n  | 'a'\n  | 'b'")
        assert node == UnionType(types=[LiteralType(text="'a'"), LiteralType(text="'b'")])

    def test_intersection_binds_tighter(self):
        node = _type_of("A & B | C")
        assert isinstance(node, UnionType)
        assert isinstance(node.types[0], IntersectionType)

    def test_array_of_parenthesized_union(self):
        node = _type_of("(A | B)[]")
        assert isinstance(node, ArrayType)
        assert isinstance(node.element, Parenthesized)

    def test_generic_reference(self):
        node = _type_of("Foo.Bar<string, Baz[]>")
        assert node.name == "Foo.Bar"
        assert node.type_arguments == [Keyword(name="string"), ArrayType(element=ref("Baz"))]

    def test_indexed_access(self):
        node = _type_of('D["itemTypeId"]')
        assert node == IndexedAccess(object=ref("D"), index=string_literal("itemTypeId"))

    def test_literals(self):
        assert _type_of("-1") == LiteralType(text="-1")
        assert _type_of("true") == LiteralType(text="true")
        assert _type_of("3.5") == LiteralType(text="3.5")

    def test_tuple(self):
        node = _type_of("[string, number?, ...boolean[]]")
        assert isinstance(node, TupleType)
        assert len(node.elements) == 3

    def test_type_operators(self):
        node = _type_of("keyof Foo")
        assert node == TypeOperator(operator="keyof", type=ref("Foo"))
        assert _type_of("readonly string[]") == TypeOperator(
            operator="readonly", type=ArrayType(element=Keyword(name="string"))
        )

    def test_conditional(self):
        node = _type_of("M extends false ? A : B")
        assert node == Conditional(
            check=ref("M"), extends=LiteralType(text="false"), true_type=ref("A"), false_type=ref("B")
        )

    def test_type_literal_members(self):
        node = _type_of(
            """{
  /** The id */
  readonly id: string;
  "a-b"?: number
  readonly: boolean,
  [key: string]: unknown;
}"""
        )
        assert isinstance(node, TypeLiteral)
        first, second, third, fourth = node.members
        assert first == PropertySignature(
            name="id", readonly=True, type=Keyword(name="string"), doc="/** The id */"
        )
        assert second.quoted is True and second.optional is True
        assert third.name == "readonly" and third.readonly is False
        assert isinstance(fourth, IndexSignature)
        assert fourth.parameter == "key"

    def test_array_suffix_on_next_line_is_not_postfix(self):
        node = _type_of("{\n  a: B\n  [k: string]: C\n}")
        assert node.members[0].type == ref("B")
        assert isinstance(node.members[1], IndexSignature)


class TestReadDeclarations:
    def test_declarations_and_docs(self):
        batch = read_declarations(
            "/** first */\nexport type A<T extends string = 'x'> = T;\n"
            "export declare interface B { a: A<'y'> }\n"
            "// trailing\n"
        )
        first, second = batch.declarations
        assert first.doc == "/** first */"
        assert first.type_parameters[0].name == "T"
        assert first.type_parameters[0].default == LiteralType(text="'x'")
        assert second.kind == "interface"
        assert second.exported is True
        assert batch.trailer == "// trailing"

    def test_interface_inheritance_is_rejected(self):
        with pytest.raises(DeclarationSyntaxError, match="inheritance"):
            read_declarations("interface A extends B { }")

    def test_garbage(self):
        with pytest.raises(DeclarationSyntaxError, match="Expected a type or interface declaration"):
            read_declarations("const a = 1;")

    def test_missing_member_separator(self):
        with pytest.raises(DeclarationSyntaxError, match="Expected ';' between members"):
            read_declarations("type A = { a: string b: string };")


class TestPrinter:
    def test_parenthesizes_by_precedence(self):
        node = ArrayType(element=UnionType(types=[ref("A"), ref("B")]))
        assert print_type(node) == "(A | B)[]"
        node = IntersectionType(types=[UnionType(types=[ref("A"), ref("B")]), ref("C")])
        assert print_type(node) == "(A | B) & C"

    def test_nested_literal_indentation(self):
        node = TypeLiteral(
            members=[
                PropertySignature(
                    name="a",
                    type=TypeLiteral(members=[PropertySignature(name="b", optional=True, type=ref("B"))]),
                )
            ]
        )
        assert print_type(node) == "{\n    a: {\n        b?: B;\n    };\n}"

    def test_empty_literal(self):
        assert print_type(TypeLiteral()) == "{}"

    def test_non_identifier_names_are_quoted(self):
        node = TypeLiteral(members=[PropertySignature(name="x-y", type=Keyword(name="string"))])
        assert print_type(node) == '{\n    "x-y": string;\n}'

    def test_interface_form(self):
        declaration = read_declarations("export interface A { a: string }").declarations[0]
        assert print_declaration(declaration) == "export interface A {\n    a: string;\n}"

    def test_doc_comments_are_reindented(self):
        source = "/**\n   * Doc\n   */\nexport type A = {\n  /** member */\n  a: string;\n};\n"
        assert print_declarations(read_declarations(source)) == (
            "/**\n * Doc\n */\nexport type A = {\n    /** member */\n    a: string;\n};\n"
        )

    def test_comment_before_closing_brace_is_kept(self):
        source = "export type A = {\n  a: string;\n  // keep me\n};\n"
        batch = read_declarations(source)
        assert batch.declarations[0].type.trailer == "// keep me"
        assert print_declarations(batch) == (
            "export type A = {\n    a: string;\n    // keep me\n};\n"
        )

    def test_comment_only_literal(self):
        node = _type_of("{\n  // nothing yet\n}")
        assert node.members == []
        assert print_type(node) == "{\n    // nothing yet\n}"

    def test_round_trip_is_stable(self):
        source = (
            "export type A<D extends X = X> = D extends false ? {\n"
            "    a: [string, ...number[]];\n"
            "} : keyof B;\n"
        )
        assert print_declarations(read_declarations(source)) == source
