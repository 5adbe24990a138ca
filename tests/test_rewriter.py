from pathlib import Path

import pytest

from hyperschema_codegen.config import RecordTypeNames, RewriteRules
from hyperschema_codegen.typings.nodes import (
    Conditional,
    IntersectionType,
    TypeLiteral,
)
from hyperschema_codegen.typings.printer import print_declaration
from hyperschema_codegen.typings.reader import read_declarations
from hyperschema_codegen.typings.rewriter import (
    DeclarationRewriter,
    interfaces_to_type_aliases,
    is_open_index_signature,
    rewrite_declaration_source,
    rewrite_declarations,
)

FIXTURES = Path(__file__).parent / "fixtures"

EXPECTED = '''\
/**
 * ID of record
 */
export type ItemIdentity = string;
export type ItemType = "item";
export type ItemTypeType = "item_type";
export type ItemTypeIdentity = string;
export type ItemRelationships<D extends ItemTypeDefinition = ItemTypeDefinition> = {
    item_type: {
        data: ItemTypeData<D>;
    };
};
export type FieldStableShell = {
    id: string;
    /**
     * The label of the field
     */
    label: string;
    validators?: {
        [k: string]: unknown;
    };
};
export type ItemInstancesTargetSchema<D extends ItemTypeDefinition = ItemTypeDefinition, NestedMode extends boolean = false> = NestedMode extends false ? {
    data: Item<D>[];
    included?: (Item | Field)[];
} : {
    data: ItemInNestedResponse<D>[];
    included?: (Item | Field)[];
};
export type ItemCreateSchema<D extends ItemTypeDefinition = ItemTypeDefinition> = {
    data: {
        type: ItemType;
        attributes: ToItemAttributesInRequest<D>;
        relationships: ItemRelationships;
    };
    __itemTypeId?: D["itemTypeId"];
};
export type ItemUpdateSchema<D extends ItemTypeDefinition = ItemTypeDefinition> = {
    id?: ItemIdentity;
    type: ItemType;
    item_type?: ItemTypeData<D>;
    __itemTypeId?: D["itemTypeId"];
} & ToItemAttributesInRequest<D>;
export type SiteSelfTargetSchema = {
    data: Site;
};
export type Site = {
    id: string;
    "internal-domain"?: string | null;
    locales: [string, ...string[]];
};
'''


def _rewrite_one(source: str, rules: RewriteRules | None = None) -> str:
    declarations = rewrite_declarations(read_declarations(source).declarations, rules)
    assert len(declarations) == 1
    return print_declaration(declarations[0])


@pytest.fixture
def source():
    return (FIXTURES / "schema_types.ts").read_text(encoding="utf-8")


class TestRewriteDeclarationSource:
    def test_full_batch(self, source):
        assert rewrite_declaration_source(source) == EXPECTED

    def test_dropped_declarations_are_gone(self, source):
        result = rewrite_declaration_source(source)
        assert "DatoApi" not in result
        assert "export type Item =" not in result
        assert "export type ItemTypeData" not in result
        assert "interface" not in result

    def test_rewrite_is_deterministic(self, source):
        assert rewrite_declaration_source(source) == rewrite_declaration_source(source)


class TestTargetSchema:
    def test_nested_mode_conditional(self):
        result = _rewrite_one("export type ItemSelfTargetSchema = { data: Item; };")
        assert result == (
            "export type ItemSelfTargetSchema<D extends ItemTypeDefinition = ItemTypeDefinition, "
            "NestedMode extends boolean = false> = NestedMode extends false ? {\n"
            "    data: Item<D>;\n"
            "} : {\n"
            "    data: ItemInNestedResponse<D>;\n"
            "};"
        )

    def test_included_records_stay_bare(self):
        declarations = rewrite_declarations(
            read_declarations(
                "export type ItemCreateTargetSchema = { data: Item; included?: Item[] };"
            ).declarations
        )
        body = declarations[0].type
        assert isinstance(body, Conditional)
        included = body.true_type.members[1]
        assert included.name == "included"
        assert included.type.element.name == "Item"
        assert included.type.element.type_arguments == []

    def test_already_parametrized_reference_is_kept(self):
        result = _rewrite_one("export type ItemSelfTargetSchema = { data: Item<Foo>; };")
        assert "data: Item<Foo>;" in result
        assert "ItemInNestedResponse" not in result


class TestItemSchema:
    def test_open_attributes_become_generic(self):
        result = _rewrite_one(
            "export type ItemValidateNewSchema = { attributes: { [k: string]: unknown } };"
        )
        assert result == (
            "export type ItemValidateNewSchema<D extends ItemTypeDefinition = ItemTypeDefinition> = {\n"
            "    attributes: ToItemAttributesInRequest<D>;\n"
            '    __itemTypeId?: D["itemTypeId"];\n'
            "};"
        )

    def test_trailing_comment_survives(self):
        result = _rewrite_one("export type ItemCreateSchema = {\n  id: string;\n  // end\n};")
        assert result.endswith('    __itemTypeId?: D["itemTypeId"];\n    // end\n};')

    def test_closed_attributes_are_kept(self):
        result = _rewrite_one(
            "export type ItemCreateSchema = { attributes: { title: string } };"
        )
        assert "title: string;" in result
        assert "ToItemAttributesInRequest" not in result

    def test_non_literal_body(self):
        declarations = rewrite_declarations(
            read_declarations("export type ItemCreateSchema = Foo | Bar;").declarations
        )
        body = declarations[0].type
        assert isinstance(body, IntersectionType)
        assert isinstance(body.types[1], TypeLiteral)
        assert body.types[1].members[0].name == "__itemTypeId"
        assert print_declaration(declarations[0]).endswith(
            '= (Foo | Bar) & {\n    __itemTypeId?: D["itemTypeId"];\n};'
        )


class TestCustomRules:
    def test_custom_names(self):
        rules = RewriteRules(
            drop=[],
            rename={},
            target_schemas=["RecordSelfTargetSchema"],
            item_schemas=[],
            relationships=[],
            names=RecordTypeNames(
                record="Record",
                record_in_nested_response="RecordInNestedResponse",
                record_definition="RecordDefinition",
            ),
        )
        result = _rewrite_one("export type RecordSelfTargetSchema = { data: Record };", rules)
        assert result.startswith(
            "export type RecordSelfTargetSchema<D extends RecordDefinition = RecordDefinition,"
        )
        assert "data: Record<D>;" in result
        assert "data: RecordInNestedResponse<D>;" in result

    def test_unlisted_names_pass_through(self):
        rules = RewriteRules(drop=[], rename={}, target_schemas=[], item_schemas=[], relationships=[])
        source = "export type Item = string;\nexport type ItemCreateSchema = {\n    id: string;\n};\n"
        assert rewrite_declaration_source(source, rules) == source

    def test_non_exported_declarations_pass_through(self):
        result = _rewrite_one("type Item = string;")
        assert result == "type Item = string;"

    def test_rename(self):
        result = _rewrite_one("export type FieldAttributes = { label: string };")
        assert result.startswith("export type FieldAttributesStableShell = {")


class TestHelpers:
    def test_is_open_index_signature(self):
        literal = read_declarations("type A = { [k: string]: unknown };").declarations[0].type
        assert is_open_index_signature(literal) is True

    def test_index_signature_with_other_members(self):
        literal = read_declarations("type A = { a: string; [k: string]: unknown };").declarations[0].type
        assert is_open_index_signature(literal) is False

    def test_interfaces_to_type_aliases(self):
        declarations = read_declarations("export interface A { a: string }").declarations
        converted = interfaces_to_type_aliases(declarations)
        assert converted[0].kind == "type"
        assert print_declaration(converted[0]) == "export type A = {\n    a: string;\n};"

    def test_rewriter_exposes_classification(self):
        rewriter = DeclarationRewriter()
        assert rewriter.action_for(
            read_declarations("export type ItemRelationships = {};").declarations[0]
        ).value == "relationships"
