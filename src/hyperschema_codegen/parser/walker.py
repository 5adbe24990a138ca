"""Recursive traversal over hyperschema nodes.

Only four shapes are understood: objects, unions (anyOf), arrays and
references. Anything else is reported as a ShapeError so a schema change
never produces silently wrong output.
"""

import json
from typing import Any, Callable

from hyperschema_codegen.errors import NoPropertiesDefinedError, ShapeError

# fn(object_schema, in_array_item) -> replacement
ObjectTransform = Callable[[dict, bool], Any]


def has_type(schema: Any, type_name: str) -> bool:
    """True if the schema's `type` is, or includes, `type_name`."""
    if not isinstance(schema, dict):
        return False
    declared = schema.get("type")
    if isinstance(declared, list):
        return type_name in declared
    return declared == type_name


def is_object(schema: Any) -> bool:
    return has_type(schema, "object")


def is_array(schema: Any) -> bool:
    return has_type(schema, "array")


def is_ref(schema: Any) -> bool:
    return isinstance(schema, dict) and "$ref" in schema


def map_inner(
    schema: Any,
    fn: ObjectTransform,
    context: str = "schema",
    in_array_item: bool = False,
) -> Any:
    """Apply `fn` to every object-shaped node reachable through anyOf/items.

    References are returned untouched, dereferencing them is the caller's job.
    Unions and arrays are rebuilt in place with the transformed branches.
    """
    if schema is None:
        return None

    if is_ref(schema):
        return schema

    if is_object(schema):
        return fn(schema, in_array_item)

    if isinstance(schema, dict) and "anyOf" in schema:
        schema["anyOf"] = [
            map_inner(branch, fn, context, in_array_item) for branch in schema["anyOf"]
        ]
        return schema

    if is_array(schema):
        items = schema.get("items")
        if isinstance(items, list):
            schema["items"] = [map_inner(item, fn, context, True) for item in items]
        elif items:
            schema["items"] = map_inner(items, fn, context, True)
        return schema

    raise ShapeError(f"Problem with {context}: {json.dumps(schema, indent=2, default=str)}")


def collect_property_names(schema: Any, context: str = "schema") -> list[str]:
    """List the property names declared by an object or a union of objects."""
    if is_object(schema):
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            raise NoPropertiesDefinedError(f"{context} declares no properties")
        return list(properties)

    if isinstance(schema, dict) and "anyOf" in schema:
        names: list[str] = []
        for branch in schema["anyOf"]:
            names.extend(collect_property_names(branch, context))
        return names

    raise ShapeError(f"Cannot list properties of {context}")
