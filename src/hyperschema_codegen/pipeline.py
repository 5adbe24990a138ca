"""End-to-end generation over one hyperschema document.

Two documents (e.g. the site API and the account API) are independent
calls of extract_info_from_schema; nothing is shared between them.
"""

import copy
import logging

from hyperschema_codegen.config import GeneratorConfig
from hyperschema_codegen.errors import ShapeError
from hyperschema_codegen.generator.compiler import CompileDeclarations
from hyperschema_codegen.generator.simplifier import simplify
from hyperschema_codegen.parser.base import SchemaInfo
from hyperschema_codegen.parser.endpoints import extract_endpoints
from hyperschema_codegen.typings.rewriter import rewrite_declaration_source

logger = logging.getLogger(__name__)


def find_base_url(document: dict) -> str:
    links = document.get("links")
    if not links or "href" not in links[0]:
        raise ShapeError("Missing base URL: the document has no top-level link")
    return links[0]["href"]


def extract_info_from_schema(
    document: dict,
    compile_declarations: CompileDeclarations,
    config: GeneratorConfig | None = None,
) -> SchemaInfo:
    """Produce resources plus both tiers of rewritten declarations."""
    config = config or GeneratorConfig()

    logger.info("Compiling raw declarations")
    typings = rewrite_declaration_source(
        compile_declarations(copy.deepcopy(document)), config.rewrite
    )

    logger.info("Compiling simplified declarations")
    simple_typings = rewrite_declaration_source(
        compile_declarations(simplify(document)), config.rewrite
    )

    resources = extract_endpoints(document, config)
    logger.info("Extracted %d resources", len(resources))

    return SchemaInfo(
        base_url=find_base_url(document),
        resources=resources,
        typings=typings,
        simple_typings=simple_typings,
    )
