"""Endpoint extraction from a dereferenced hyperschema.

Each resource definition carries a `links` array; every link becomes an
EndpointInfo describing its URL template, method names, request/response
type names, pagination and whether an ergonomic (attributes/relationships
split) variant of the method can be generated.
"""

import logging
import re
from typing import Any

from hyperschema_codegen.config import GeneratorConfig
from hyperschema_codegen.errors import (
    MultiplePlaceholderError,
    NoPropertiesDefinedError,
    ShapeError,
)
from hyperschema_codegen.naming import normalize_rel, to_safe_name
from hyperschema_codegen.parser.base import (
    EndpointInfo,
    Pagination,
    RequestStructure,
    ResourceInfo,
    UrlPlaceholder,
)
from hyperschema_codegen.parser.refs import dereference
from hyperschema_codegen.parser.walker import (
    collect_property_names,
    has_type,
    is_array,
    is_object,
)

logger = logging.getLogger(__name__)

IDENTITY_PATTERN = re.compile(r"\{\(.*?definitions%2F(.*?)%2Fdefinitions%2Fidentity\)\}")

WILDCARD = "*"

PRIVATE_LINK_NOTE = "This API call is to be considered private and might change without notice"


def extract_endpoints(document: dict, config: GeneratorConfig | None = None) -> list[ResourceInfo]:
    """Build ResourceInfo for every resource that exposes at least one link."""
    config = config or GeneratorConfig()
    schema = dereference(document)

    resources = schema.get("properties")
    if not isinstance(resources, dict):
        raise ShapeError("Missing resources!")

    result = []
    for json_api_type, resource_schema in resources.items():
        info = extract_resource(json_api_type, resource_schema, config)
        if info.endpoints:
            result.append(info)
    return result


def extract_resource(json_api_type: str, schema: dict, config: GeneratorConfig) -> ResourceInfo:
    if not isinstance(schema, dict) or "links" not in schema:
        raise ShapeError(f"Missing links in {json_api_type}!")

    endpoints = [_extract_endpoint(json_api_type, link, config) for link in schema["links"]]

    has_collection = any(
        e.returns_collection or (e.name == "find" and len(e.url_placeholders) == 1)
        for e in endpoints
    )
    return ResourceInfo(
        json_api_type=json_api_type,
        namespace=to_safe_name(f"{json_api_type}s" if has_collection else json_api_type, False),
        resource_class_name=to_safe_name(json_api_type, True),
        endpoints=endpoints,
    )


def _extract_endpoint(json_api_type: str, link: dict, config: GeneratorConfig) -> EndpointInfo:
    rel = link["rel"]
    url_template, placeholders = build_url_template(json_api_type, rel, link["href"])

    type_prefix = f"{to_safe_name(json_api_type, True)}{to_safe_name(rel, True)}"
    normalized_rel = normalize_rel(rel)

    request_schema = link.get("schema")
    href_schema = link.get("hrefSchema")
    return_schema = link.get("jobSchema") or link.get("targetSchema")

    returns_item = bool(return_schema) and find_type_in_data_property(return_schema) == config.record_type

    request_structure = None
    if request_schema:
        request_structure = RequestStructure(
            type=find_type_in_data_property(request_schema),
            id_required=find_id_is_required(request_schema),
            attributes=find_properties_in_data_property(request_schema, "attributes"),
            relationships=find_properties_in_data_property(request_schema, "relationships"),
        )

    simple_method_available = not is_ambiguous(request_structure)
    if not simple_method_available:
        logger.warning(
            "Too much ambiguity to generate the simple version: %s.%s", json_api_type, rel
        )

    doc_url = None
    if config.docs_base_url:
        doc_url = f"{config.docs_base_url.rstrip('/')}/{json_api_type.replace('_', '-')}/{rel}"

    return EndpointInfo(
        rel=rel,
        name=to_safe_name(normalized_rel, False),
        raw_name=to_safe_name(f"raw_{normalized_rel}", False),
        returns_collection=any(marker in rel for marker in ("query", "instances")),
        url_template=url_template,
        method=link["method"],
        comment=link.get("title", ""),
        doc_url=doc_url,
        url_placeholders=placeholders,
        entity_id_placeholder=next((p for p in placeholders if p.is_entity_id), None),
        returns_item=returns_item,
        request_body_requires_item=bool(request_structure)
        and request_structure.type == config.record_type,
        offers_nested_items_option_in_query_params=returns_item
        and "nested" in _properties(href_schema),
        simple_method_available=simple_method_available,
        request_body_type=f"{type_prefix}Schema" if request_schema else None,
        optional_request_body=has_type(request_schema, "null"),
        request_structure=request_structure,
        query_params_type=f"{type_prefix}HrefSchema" if href_schema else None,
        query_params_required=bool(href_schema and href_schema.get("required")),
        response_type=_response_type(type_prefix, link),
        deprecated=PRIVATE_LINK_NOTE if link.get("private") else None,
        paginated_response=find_pagination(href_schema),
    )


def build_url_template(json_api_type: str, rel: str, href: str) -> tuple[str, list[UrlPlaceholder]]:
    """Replace identity placeholders in an href with `${variable}` substitutions."""
    placeholders: list[UrlPlaceholder] = []

    def substitute(match: re.Match) -> str:
        placeholder = match.group(1)
        variable_name = to_safe_name(f"{placeholder}_id", False)
        placeholders.append(
            UrlPlaceholder(
                variable_name=variable_name,
                is_entity_id=placeholder == json_api_type,
                rel_type=to_safe_name(f"{placeholder}_data", True),
            )
        )
        return "${" + variable_name + "}"

    url_template = IDENTITY_PATTERN.sub(substitute, href)

    if len(placeholders) > 1:
        raise MultiplePlaceholderError(f"More than one placeholder in {json_api_type}#{rel}")

    return url_template, placeholders


def _response_type(type_prefix: str, link: dict) -> str | None:
    if link.get("jobSchema"):
        return f"{type_prefix}JobSchema"
    if link.get("targetSchema"):
        return f"{type_prefix}TargetSchema"
    return None


def _properties(schema: Any) -> dict:
    if isinstance(schema, dict) and isinstance(schema.get("properties"), dict):
        return schema["properties"]
    return {}


def find_pagination(href_schema: dict | None) -> Pagination | None:
    page = _properties(href_schema).get("page")
    page_properties = _properties(page)
    limit = page_properties.get("limit")
    if "offset" not in page_properties or not isinstance(limit, dict):
        return None
    return Pagination(default_limit=limit.get("default"), max_limit=limit.get("maximum"))


def is_ambiguous(structure: RequestStructure | None) -> bool:
    if structure is None:
        return False
    if structure.type == WILDCARD:
        return True
    if structure.attributes == WILDCARD and structure.relationships == WILDCARD:
        return True
    if isinstance(structure.attributes, list) and isinstance(structure.relationships, list):
        return any(name in structure.relationships for name in structure.attributes)
    return False


def find_data_objects(schema: dict) -> list[dict]:
    """Return every object schema the `data` property of an envelope can take."""
    data = _properties(schema).get("data")
    if not isinstance(data, dict):
        raise ShapeError("Missing data!")

    def find(node: Any) -> list[dict]:
        if isinstance(node, list):
            return [found for item in node for found in find(item)]
        if is_array(node):
            items = node.get("items")
            return find(items) if isinstance(items, (dict, list)) else []
        if isinstance(node, dict) and "anyOf" in node:
            return [found for branch in node["anyOf"] for found in find(branch)]
        if not is_object(node):
            raise ShapeError("Data not an object?")
        return [node]

    return find(data)


def _entity_type(data_schema: dict) -> str | None:
    type_schema = _properties(data_schema).get("type")
    if not isinstance(type_schema, dict):
        return None
    if "const" in type_schema:
        return type_schema["const"]
    enum = type_schema.get("enum")
    if isinstance(enum, list) and len(enum) == 1:
        return enum[0]
    return type_schema.get("example")


def find_type_in_data_property(schema: dict) -> str | None:
    """The single JSON:API type accepted in `data`, or "*" if there are several."""
    if "data" not in _properties(schema):
        return None
    types = list(dict.fromkeys(_entity_type(d) for d in find_data_objects(schema)))
    if len(types) == 1 and types[0] is not None:
        return types[0]
    return WILDCARD


def _id_is_required_in_data_object(data_schema: Any) -> bool | None:
    if not is_object(data_schema):
        raise ShapeError("Data not an object?")
    properties = data_schema.get("properties")
    if not isinstance(properties, dict):
        raise ShapeError("Missing data?")
    required = data_schema.get("required")
    if isinstance(properties.get("id"), dict) and isinstance(required, list) and "id" in required:
        return True
    return None


def find_id_is_required(schema: dict) -> bool | None:
    data = _properties(schema).get("data")
    if not isinstance(data, dict):
        raise ShapeError("Missing data!")

    if is_array(data):
        return True

    if "anyOf" in data:
        variants = {_id_is_required_in_data_object(branch) for branch in data["anyOf"]}
        if len(variants) != 1:
            raise ShapeError("Cannot tell whether id is required: anyOf variants disagree")
        return variants.pop()

    return _id_is_required_in_data_object(data)


def find_properties_in_property(schema: Any, property_name: str) -> list[str]:
    if is_array(schema):
        return []

    if is_object(schema):
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            raise ShapeError(f"Data object declares no properties, cannot find {property_name}")
        property_schema = properties.get(property_name)
        if not property_schema:
            return []
        if not isinstance(property_schema, dict):
            raise ShapeError(f"Unexpected {property_name} schema")
        return collect_property_names(property_schema, property_name)

    if isinstance(schema, dict) and "anyOf" in schema:
        return [
            name
            for branch in schema["anyOf"]
            for name in find_properties_in_property(branch, property_name)
        ]

    raise ShapeError(f"Don't know how to find {property_name}")


def find_properties_in_data_property(schema: dict, property_name: str) -> list[str] | str:
    """Names declared under data.<property_name>, or "*" when they can't be known."""
    if not isinstance(_properties(schema).get("data"), dict):
        return []

    data_objects = find_data_objects(schema)
    if len(data_objects) > 1:
        return WILDCARD
    if not data_objects:
        return []

    try:
        return find_properties_in_property(data_objects[0], property_name)
    except NoPropertiesDefinedError:
        return WILDCARD
