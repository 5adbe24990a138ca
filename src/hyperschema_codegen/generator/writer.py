"""Persisting generated artefacts."""

import json
from pathlib import Path

from hyperschema_codegen.parser.base import ResourceInfo, SchemaInfo

RESOURCES_FILE = "resources.json"
TYPINGS_FILE = "SchemaTypes.ts"
SIMPLE_TYPINGS_FILE = "SimpleSchemaTypes.ts"


def resources_to_json(resources: list[ResourceInfo]) -> str:
    """Serialize resources; endpoints without a simple method omit `name`."""
    data = []
    for resource in resources:
        item = resource.model_dump(mode="json", exclude={"endpoints"}, exclude_none=True)
        item["endpoints"] = []
        for endpoint in resource.endpoints:
            dumped = endpoint.model_dump(
                mode="json", exclude={"simple_method_available"}, exclude_none=True
            )
            if not endpoint.simple_method_available:
                del dumped["name"]
            item["endpoints"].append(dumped)
        data.append(item)
    return json.dumps(data, indent=2) + "\n"


def write_outputs(info: SchemaInfo, output_dir: Path) -> list[Path]:
    """Write resources.json and both declaration files, returns the written paths."""
    contents = {
        RESOURCES_FILE: resources_to_json(info.resources),
        TYPINGS_FILE: info.typings,
        SIMPLE_TYPINGS_FILE: info.simple_typings,
    }

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for filename, content in contents.items():
        file_path = output_dir / filename
        file_path.write_text(content, encoding="utf-8")
        written.append(file_path)
    return written
