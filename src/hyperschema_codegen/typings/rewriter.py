"""Rewriting of generated declarations into their generic form.

The compiler produces plain, non-generic declarations. Some of them are
replaced by hand-written counterparts (dropped), some are kept under a
"stable shell" name (renamed) and the record-related ones become generic
over the record definition `D`:

* target schemas get `<D, NestedMode>` and turn into
  `NestedMode extends false ? ...Item<D>... : ...ItemInNestedResponse<D>...`,
  except under an `included` property, where records stay untyped;
* item (request) schemas get `<D>`, their open `attributes` become
  `ToItemAttributesInRequest<D>` and an optional `__itemTypeId` member is
  appended;
* relationships get `<D>` and parameterize `ItemTypeData`.

Everything else passes through untouched, in order.
"""

import logging
from typing import Callable

from hyperschema_codegen.config import RewriteAction, RewriteRules
from hyperschema_codegen.typings.nodes import (
    Conditional,
    Declaration,
    DeclarationBatch,
    IndexedAccess,
    IndexSignature,
    IntersectionType,
    Keyword,
    LiteralType,
    Node,
    PropertySignature,
    TypeLiteral,
    TypeNode,
    TypeParameter,
    TypeReference,
    ref,
    string_literal,
)
from hyperschema_codegen.typings.printer import print_declarations
from hyperschema_codegen.typings.reader import read_declarations

logger = logging.getLogger(__name__)

Visitor = Callable[[Node], Node]


def map_children(node: Node, visit: Visitor) -> Node:
    """Rebuild `node` with `visit` applied to each direct child node."""
    changes = {}
    for name, value in node:
        if isinstance(value, Node):
            new_value = visit(value)
        elif isinstance(value, list) and any(isinstance(v, Node) for v in value):
            new_value = [visit(v) if isinstance(v, Node) else v for v in value]
        else:
            continue
        if new_value is not value and new_value != value:
            changes[name] = new_value
    return node.model_copy(update=changes) if changes else node


def is_open_index_signature(node: TypeNode | None) -> bool:
    """True for `{ [k: string]: ... }` with no other members."""
    return (
        isinstance(node, TypeLiteral)
        and len(node.members) == 1
        and isinstance(node.members[0], IndexSignature)
    )


class DeclarationRewriter:
    def __init__(self, rules: RewriteRules | None = None):
        self.rules = rules or RewriteRules()
        self.names = self.rules.names
        self.actions = self.rules.classification()

    # -- type parameters --

    def _record_definition_parameter(self) -> TypeParameter:
        definition = ref(self.names.record_definition)
        return TypeParameter(name="D", constraint=definition, default=definition)

    def _nested_mode_parameter(self) -> TypeParameter:
        return TypeParameter(
            name="NestedMode",
            constraint=Keyword(name="boolean"),
            default=LiteralType(text="false"),
        )

    # -- shared visitors --

    def replace_record(self, node: Node, replacement: TypeNode, suppress: bool = False) -> Node:
        """Swap bare record references for `replacement`.

        Below a property named `included` references stay bare: sideloaded
        records come back untyped.
        """
        if isinstance(node, TypeReference) and node.name == self.names.record and not node.type_arguments:
            return node if suppress else replacement

        if isinstance(node, PropertySignature) and node.name == "included":
            return map_children(node, lambda child: self.replace_record(child, replacement, True))

        return map_children(node, lambda child: self.replace_record(child, replacement, suppress))

    def parametrize_metadata(self, node: Node) -> Node:
        if isinstance(node, TypeReference) and node.name == self.names.record_type_metadata:
            return ref(self.names.record_type_metadata, ref("D"))
        return map_children(node, self.parametrize_metadata)

    # -- rule implementations --

    def rewrite_target_schema(self, declaration: Declaration) -> Declaration:
        body = declaration.type
        flat = self.replace_record(body, ref(self.names.record, ref("D")))
        nested = self.replace_record(body, ref(self.names.record_in_nested_response, ref("D")))
        return declaration.model_copy(
            update={
                "kind": "type",
                "type_parameters": [self._record_definition_parameter(), self._nested_mode_parameter()],
                "type": Conditional(
                    check=ref("NestedMode"),
                    extends=LiteralType(text="false"),
                    true_type=flat,
                    false_type=nested,
                ),
            }
        )

    def rewrite_item_schema(self, declaration: Declaration) -> Declaration:
        attributes_in_request = ref(self.names.attributes_in_request, ref("D"))

        def visit(node: Node) -> Node:
            if (
                isinstance(node, PropertySignature)
                and node.name == "attributes"
                and is_open_index_signature(node.type)
            ):
                return node.model_copy(update={"type": attributes_in_request})
            if isinstance(node, TypeReference) and node.name == self.names.record_type_metadata:
                return ref(self.names.record_type_metadata, ref("D"))
            return map_children(node, visit)

        body = visit(declaration.type)
        type_id_member = PropertySignature(
            name=self.names.record_type_id_member,
            optional=True,
            type=IndexedAccess(object=ref("D"), index=string_literal(self.names.record_type_id_key)),
        )

        if isinstance(body, TypeLiteral):
            members = [m for m in body.members if not isinstance(m, IndexSignature)]
            if len(members) != len(body.members):
                closed = body.model_copy(update={"members": [*members, type_id_member]})
                body = IntersectionType(types=[closed, attributes_in_request])
            else:
                body = body.model_copy(update={"members": [*body.members, type_id_member]})
        else:
            body = IntersectionType(types=[body, TypeLiteral(members=[type_id_member])])

        return declaration.model_copy(
            update={
                "kind": "type",
                "type_parameters": [self._record_definition_parameter()],
                "type": body,
            }
        )

    def rewrite_relationships(self, declaration: Declaration) -> Declaration:
        return declaration.model_copy(
            update={
                "kind": "type",
                "type_parameters": [self._record_definition_parameter()],
                "type": self.parametrize_metadata(declaration.type),
            }
        )

    # -- dispatch --

    def action_for(self, declaration: Declaration) -> RewriteAction:
        if not declaration.exported:
            return RewriteAction.PASSTHROUGH
        return self.actions.get(declaration.name, RewriteAction.PASSTHROUGH)

    def rewrite(self, declarations: list[Declaration]) -> list[Declaration]:
        result = []
        for declaration in declarations:
            action = self.action_for(declaration)
            if action is RewriteAction.DROP:
                logger.debug("Dropping %s", declaration.name)
                continue
            if action is RewriteAction.RENAME:
                result.append(declaration.model_copy(update={"name": self.rules.rename[declaration.name]}))
            elif action is RewriteAction.TARGET_SCHEMA:
                result.append(self.rewrite_target_schema(declaration))
            elif action is RewriteAction.ITEM_SCHEMA:
                result.append(self.rewrite_item_schema(declaration))
            elif action is RewriteAction.RELATIONSHIPS:
                result.append(self.rewrite_relationships(declaration))
            else:
                result.append(declaration)
        return result


def rewrite_declarations(
    declarations: list[Declaration], rules: RewriteRules | None = None
) -> list[Declaration]:
    """Apply the drop/rename/generic rules to a batch of declarations."""
    return DeclarationRewriter(rules).rewrite(declarations)


def interfaces_to_type_aliases(declarations: list[Declaration]) -> list[Declaration]:
    return [
        d.model_copy(update={"kind": "type"}) if d.kind == "interface" else d
        for d in declarations
    ]


def rewrite_declaration_source(source: str, rules: RewriteRules | None = None) -> str:
    """Parse compiler output, rewrite it and print it back."""
    batch = read_declarations(source)
    declarations = rewrite_declarations(interfaces_to_type_aliases(batch.declarations), rules)
    return print_declarations(DeclarationBatch(declarations=declarations, trailer=batch.trailer))
