"""Flattening of JSON:API envelopes.

The raw hyperschema describes entities the JSON:API way:

    {id, type, attributes: {...}, relationships: {rel: {data: ...}}, meta}

The simplified schema exposes one flat property bag instead:

    {id, type, <attribute>..., <relationship>..., meta}

Links are unwrapped too: request, target and job schemas are replaced by
their `data` sub-schema, flattened the same way.
"""

import copy
from typing import Any

from hyperschema_codegen.errors import ShapeError
from hyperschema_codegen.parser.refs import resolve_pointer
from hyperschema_codegen.parser.walker import has_type, is_object, is_ref, map_inner

# Top-level JSON:API document members; a schema declaring only these wraps its `data`
DOCUMENT_MEMBERS = frozenset({"data", "meta", "included", "links"})


def simplify(document: dict) -> dict:
    """Return a simplified copy of a raw hyperschema document."""
    schema = copy.deepcopy(document)

    for json_api_type, subschema in (schema.get("definitions") or {}).items():
        if not isinstance(subschema, dict):
            continue
        simplify_entity(schema, subschema)
        for link in subschema.get("links") or []:
            simplify_link(json_api_type, link)

    return schema


def _properties(schema: Any) -> dict:
    if isinstance(schema, dict) and isinstance(schema.get("properties"), dict):
        return schema["properties"]
    return {}


def _is_data_wrapper(schema: Any) -> bool:
    if not isinstance(schema, dict) or is_ref(schema):
        return False
    properties = _properties(schema)
    return "data" in properties and properties.keys() <= DOCUMENT_MEMBERS


def _unwrap_relationships(relationships: Any) -> None:
    for name, rel_schema in _properties(relationships).items():
        if _is_data_wrapper(rel_schema):
            relationships["properties"][name] = rel_schema["properties"]["data"]


def _is_envelope(schema: dict) -> bool:
    properties = _properties(schema)
    return "attributes" in properties or "relationships" in properties


def _promoted_required(schema: dict, attributes: Any, relationships: Any) -> list[str]:
    required = schema.get("required") or []
    promoted: list[str] = []
    if "attributes" in required and isinstance(attributes, dict):
        promoted.extend(attributes.get("required") or [])
    if "relationships" in required and isinstance(relationships, dict):
        promoted.extend(relationships.get("required") or [])
    if "meta" in required:
        promoted.append("meta")
    return promoted


def flatten_envelope(schema: dict, in_array_item: bool = False) -> dict:
    """Flatten one inline JSON:API resource object.

    Schemas without `attributes`/`relationships` are returned unchanged.
    """
    if not _is_envelope(schema):
        return schema

    properties = _properties(schema)
    attributes = properties.get("attributes")
    relationships = properties.get("relationships")

    required = []
    # ids are mandatory in arrays of resource identifiers, optional elsewhere
    if in_array_item and "id" in (schema.get("required") or []):
        required.append("id")
    required.extend(_promoted_required(schema, attributes, relationships))

    flat: dict[str, Any] = {}
    for key in ("id", "type"):
        if key in properties:
            flat[key] = properties[key]
    flat.update(_properties(attributes))
    for name, rel_schema in _properties(relationships).items():
        flat[name] = rel_schema["properties"]["data"] if _is_data_wrapper(rel_schema) else rel_schema
    if "meta" in properties:
        flat["meta"] = properties["meta"]

    return {
        **schema,
        "additionalProperties": isinstance(attributes, dict) and "properties" not in attributes,
        "required": list(dict.fromkeys(required)),
        "properties": flat,
    }


def _entity_member(document: dict, member: Any) -> tuple[Any, str | None]:
    """Resolve an entity's attributes/relationships schema and its $ref, if any."""
    if is_ref(member):
        return resolve_pointer(document, member["$ref"]), member["$ref"]
    return member, None


def simplify_entity(document: dict, schema: dict) -> None:
    """Flatten an entity definition in place.

    Attributes and relationships stay in their own definitions; the entity's
    properties point into them with one $ref per member.
    """
    relationships_definition = (schema.get("definitions") or {}).get("relationships")
    if relationships_definition is not None:
        _unwrap_relationships(relationships_definition)

    if not _is_envelope(schema):
        return

    properties = schema["properties"]
    attributes, attributes_ref = _entity_member(document, properties.get("attributes"))
    relationships, relationships_ref = _entity_member(document, properties.get("relationships"))
    if relationships is not relationships_definition:
        _unwrap_relationships(relationships)

    flat: dict[str, Any] = {}
    for key in ("id", "type"):
        if key in properties:
            flat[key] = properties[key]
    for member, ref in ((attributes, attributes_ref), (relationships, relationships_ref)):
        for name, member_schema in _properties(member).items():
            flat[name] = {"$ref": f"{ref}/properties/{name}"} if ref else member_schema
    if "meta" in properties:
        flat["meta"] = properties["meta"]

    required = ["id", "type", *_promoted_required(schema, attributes, relationships)]
    schema["required"] = list(dict.fromkeys(required))
    schema["properties"] = flat

    if isinstance(attributes, dict) and "properties" not in attributes:
        schema["additionalProperties"] = True


def _unwrap_link_schema(json_api_type: str, link: dict, key: str) -> None:
    original = link.get(key)
    if not _is_data_wrapper(original):
        return

    context = f"{json_api_type} {link.get('rel')} {key}"
    simplified = map_inner(original["properties"]["data"], flatten_envelope, context)

    if has_type(original, "null"):
        if not is_object(simplified):
            raise ShapeError(f"Problem with {context}: nullable body is not an object")
        simplified["type"] = ["object", "null"]

    link[key] = simplified


def simplify_link(json_api_type: str, link: dict) -> None:
    for key in ("schema", "targetSchema", "jobSchema"):
        _unwrap_link_schema(json_api_type, link, key)
