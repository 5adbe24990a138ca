"""Data models describing the resources and endpoints of a hyperschema.

The extractor turns every link of every resource into an EndpointInfo;
downstream renderers only ever read these models.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

Wildcard = Literal["*"]


class UrlPlaceholder(BaseModel):
    """A `${variable}` substitution inside an endpoint URL template."""

    model_config = ConfigDict(frozen=True)

    variable_name: str
    is_entity_id: bool
    rel_type: str  # ItemData, UploadData, ...


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    default_limit: int | None
    max_limit: int | None


class RequestStructure(BaseModel):
    """How a request body splits into JSON:API attributes and relationships."""

    model_config = ConfigDict(frozen=True)

    type: str  # "*" when more than one entity type is accepted
    id_required: bool | None = None
    attributes: list[str] | Wildcard
    relationships: list[str] | Wildcard


class EndpointInfo(BaseModel):
    """Everything a renderer needs to know about a single API operation."""

    model_config = ConfigDict(frozen=True)

    rel: str
    name: str
    raw_name: str
    returns_collection: bool
    url_template: str
    method: str
    comment: str
    doc_url: str | None = None
    url_placeholders: list[UrlPlaceholder] = []
    entity_id_placeholder: UrlPlaceholder | None = None
    returns_item: bool = False
    request_body_requires_item: bool = False
    offers_nested_items_option_in_query_params: bool = False
    simple_method_available: bool = True
    request_body_type: str | None = None
    optional_request_body: bool = False
    request_structure: RequestStructure | None = None
    query_params_type: str | None = None
    query_params_required: bool = False
    response_type: str | None = None
    deprecated: str | None = None
    paginated_response: Pagination | None = None

    @property
    def url_placeholder(self) -> UrlPlaceholder | None:
        return self.url_placeholders[0] if self.url_placeholders else None


class ResourceInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    json_api_type: str
    namespace: str
    resource_class_name: str
    endpoints: list[EndpointInfo]


class SchemaInfo(BaseModel):
    """Result of running the whole pipeline over one hyperschema."""

    base_url: str
    resources: list[ResourceInfo]
    typings: str
    simple_typings: str
