"""Internal $ref resolution.

Every `{"$ref": "#/..."}` node is replaced by the node it points to. Targets
are shared rather than copied, so recursive schemas become cyclic object
graphs instead of infinitely deep trees.
"""

import copy
from typing import Any
from urllib.parse import unquote

from hyperschema_codegen.errors import UnresolvableReferenceError


def _decode_pointer_token(token: str) -> str:
    # JSON Pointer escaping per RFC 6901
    return unquote(token).replace("~1", "/").replace("~0", "~")


def resolve_pointer(document: Any, ref: str) -> Any:
    """Return the node addressed by an internal reference such as `#/definitions/item`."""
    if not ref.startswith("#"):
        raise UnresolvableReferenceError(f"Only internal references are supported: {ref}")

    pointer = ref[1:]
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        raise UnresolvableReferenceError(f"Malformed JSON pointer: {ref}")

    node = document
    for raw_token in pointer[1:].split("/"):
        token = _decode_pointer_token(raw_token)
        if isinstance(node, list):
            try:
                node = node[int(token)]
            except (ValueError, IndexError) as e:
                raise UnresolvableReferenceError(f"Cannot resolve {ref}") from e
        elif isinstance(node, dict) and token in node:
            node = node[token]
        else:
            raise UnresolvableReferenceError(f"Cannot resolve {ref}")
    return node


def dereference(document: dict) -> dict:
    """Return a copy of the document with every internal $ref inlined."""
    root = copy.deepcopy(document)
    resolved: dict[str, Any] = {}
    visited: set[int] = set()

    def target(ref: str) -> Any:
        if ref in resolved:
            return resolved[ref]
        node = resolve_pointer(root, ref)
        resolved[ref] = node
        result = walk(node)
        resolved[ref] = result
        return result

    def walk(node: Any) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                return target(ref)
            if id(node) in visited:
                return node
            visited.add(id(node))
            for key, value in node.items():
                node[key] = walk(value)
        elif isinstance(node, list):
            if id(node) in visited:
                return node
            visited.add(id(node))
            for index, value in enumerate(node):
                node[index] = walk(value)
        return node

    return walk(root)
