"""Generator configuration.

Defaults match the DatoCMS site API; every value can be overridden from a
YAML file and a couple of them from the environment.
"""

import os
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, model_validator

from hyperschema_codegen.errors import OverlappingRulesError

DEFAULT_FETCH_TIMEOUT = 30.0


class RewriteAction(Enum):
    DROP = "drop"
    RENAME = "rename"
    TARGET_SCHEMA = "target_schema"
    ITEM_SCHEMA = "item_schema"
    RELATIONSHIPS = "relationships"
    PASSTHROUGH = "passthrough"


class RecordTypeNames(BaseModel):
    """Names of the hand-written types the generated declarations refer to."""

    record: str = "Item"
    record_in_nested_response: str = "ItemInNestedResponse"
    record_definition: str = "ItemTypeDefinition"
    record_type_metadata: str = "ItemTypeData"
    attributes_in_request: str = "ToItemAttributesInRequest"
    record_type_id_member: str = "__itemTypeId"
    record_type_id_key: str = "itemTypeId"


class RewriteRules(BaseModel):
    """Which exported declarations get dropped, renamed or made generic."""

    drop: list[str] = ["DatoApi", "ItemAttributes", "ItemTypeData", "Item"]
    rename: dict[str, str] = {
        "Field": "FieldStableShell",
        "FieldAttributes": "FieldAttributesStableShell",
        "FieldCreateSchema": "FieldCreateSchemaStableShell",
        "FieldUpdateSchema": "FieldUpdateSchemaStableShell",
    }
    target_schemas: list[str] = [
        "ItemInstancesTargetSchema",
        "UploadReferencesTargetSchema",
        "ItemSelfTargetSchema",
        "ItemCreateTargetSchema",
        "ItemDuplicateJobSchema",
        "ItemUpdateTargetSchema",
        "ItemDestroyJobSchema",
        "ItemPublishTargetSchema",
        "ItemUnpublishTargetSchema",
        "ItemReferencesTargetSchema",
        "ItemVersionRestoreJobSchema",
        "ScheduledPublicationDestroyTargetSchema",
        "ScheduledUnpublishingDestroyTargetSchema",
    ]
    item_schemas: list[str] = [
        "ItemValidateExistingSchema",
        "ItemValidateNewSchema",
        "ItemCreateSchema",
        "ItemUpdateSchema",
    ]
    relationships: list[str] = ["ItemRelationships"]
    names: RecordTypeNames = RecordTypeNames()

    @model_validator(mode="after")
    def _check_disjoint(self) -> "RewriteRules":
        self.classification()
        return self

    def classification(self) -> dict[str, RewriteAction]:
        """Map every named declaration to its single rewrite action."""
        buckets = [
            (RewriteAction.DROP, self.drop),
            (RewriteAction.RENAME, list(self.rename)),
            (RewriteAction.TARGET_SCHEMA, self.target_schemas),
            (RewriteAction.ITEM_SCHEMA, self.item_schemas),
            (RewriteAction.RELATIONSHIPS, self.relationships),
        ]
        table: dict[str, RewriteAction] = {}
        for action, names in buckets:
            for name in names:
                previous = table.get(name)
                if previous is not None and previous is not action:
                    raise OverlappingRulesError(
                        f"{name} is listed both as {previous.value} and {action.value}"
                    )
                table[name] = action
        return table


class GeneratorConfig(BaseModel):
    record_type: str = "item"
    docs_base_url: str | None = None
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    rewrite: RewriteRules = RewriteRules()


def load_config(path: Path | None = None) -> GeneratorConfig:
    """Load configuration from an optional YAML file plus environment overrides."""
    data: dict = {}
    if path is not None:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    timeout = os.getenv("HYPERSCHEMA_CODEGEN_TIMEOUT")
    if timeout:
        data["fetch_timeout"] = float(timeout)

    docs_url = os.getenv("HYPERSCHEMA_CODEGEN_DOCS_URL")
    if docs_url:
        data["docs_base_url"] = docs_url

    return GeneratorConfig(**data)
