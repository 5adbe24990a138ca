"""Identifier helpers shared by the extractor and the renderers."""

import re

REL_TO_METHOD_NAME = {
    "instances": "list",
    "self": "find",
    "me": "findMe",
}


def to_safe_name(value: str, pascal_case: bool) -> str:
    """Turn an arbitrary string into a valid TypeScript identifier.

    snake_case and spaced words are camel-cased; `pascal_case` also
    upper-cases the first character.
    """
    if pascal_case and value:
        value = value[0].upper() + value[1:]

    # First character: a-zA-Z | _ | $, rest may also contain digits
    value = re.sub(r"(^\s*[^a-zA-Z_$])|([^a-zA-Z_$\d])", " ", value)
    value = re.sub(r"^_[a-z]", lambda m: m.group(0).upper(), value)
    value = re.sub(r"_[a-z]", lambda m: m.group(0)[1:].upper(), value)
    value = re.sub(r"[\d$]+[a-zA-Z]", lambda m: m.group(0).upper(), value)
    value = re.sub(r"\s+[a-zA-Z]", lambda m: m.group(0).upper().strip(), value)
    return re.sub(r"\s", "", value)


def normalize_rel(rel: str) -> str:
    """Map a link rel to the method name exposed by the generated client."""
    if rel in REL_TO_METHOD_NAME:
        return REL_TO_METHOD_NAME[rel]
    if "_instances" in rel:
        return rel.replace("_instances", "_list", 1)
    return rel
