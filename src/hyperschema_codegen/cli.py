"""CLI entry point for hyperschema-codegen."""

import json
import logging
from pathlib import Path

import click
import yaml

from hyperschema_codegen.config import GeneratorConfig, load_config
from hyperschema_codegen.errors import HyperschemaError
from hyperschema_codegen.generator.compiler import CommandCompiler
from hyperschema_codegen.generator.simplifier import simplify
from hyperschema_codegen.generator.writer import resources_to_json, write_outputs
from hyperschema_codegen.parser.endpoints import extract_endpoints
from hyperschema_codegen.parser.hyperschema import load_hyperschema
from hyperschema_codegen.pipeline import extract_info_from_schema
from hyperschema_codegen.typings.rewriter import rewrite_declaration_source


def _load(source: str, config: GeneratorConfig) -> dict:
    click.echo(f"Loading {source}...")
    try:
        return load_hyperschema(source, timeout=config.fetch_timeout)
    except (OSError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot load {source}: {e}") from e


@click.group()
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("-v", "--verbose", is_flag=True, help="Log progress information.")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: bool):
    """Hyperschema codegen: extract endpoints and rewrite declarations from an API hyperschema."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e


@main.command()
@click.argument("source")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for resources JSON.")
@click.pass_obj
def extract(config: GeneratorConfig, source: str, output: Path):
    """Extract resource and endpoint metadata from a hyperschema file or URL."""
    document = _load(source, config)
    try:
        resources = extract_endpoints(document, config)
    except HyperschemaError as e:
        raise click.ClickException(str(e)) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(resources_to_json(resources), encoding="utf-8")
    click.echo(f"Found {len(resources)} resources, saved to {output}")


@main.command("simplify")
@click.argument("source")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the simplified hyperschema.")
@click.pass_obj
def simplify_command(config: GeneratorConfig, source: str, output: Path):
    """Flatten the JSON:API envelopes of a hyperschema."""
    document = _load(source, config)
    try:
        simplified = simplify(document)
    except HyperschemaError as e:
        raise click.ClickException(str(e)) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(simplified, indent=2) + "\n", encoding="utf-8")
    click.echo(f"Simplified hyperschema saved to {output}")


@main.command()
@click.argument("declarations_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for rewritten declarations.")
@click.pass_obj
def rewrite(config: GeneratorConfig, declarations_path: Path, output: Path):
    """Apply the generic rewrite rules to a TypeScript declarations file."""
    source = declarations_path.read_text(encoding="utf-8")
    try:
        result = rewrite_declaration_source(source, config.rewrite)
    except HyperschemaError as e:
        raise click.ClickException(str(e)) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result, encoding="utf-8")
    click.echo(f"Rewritten declarations saved to {output}")


@main.command()
@click.argument("source")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for all generated files.")
@click.option("--compiler", required=True, help="Schema-to-declarations command, receives the schema path as last argument.")
@click.pass_obj
def generate(config: GeneratorConfig, source: str, output: Path, compiler: str):
    """Full pipeline: load -> extract endpoints -> compile and rewrite both declaration tiers."""
    document = _load(source, config)

    click.echo("Generating...")
    try:
        info = extract_info_from_schema(document, CommandCompiler(compiler), config)
    except HyperschemaError as e:
        raise click.ClickException(str(e)) from e

    for file_path in write_outputs(info, output):
        click.echo(f"  Created {file_path}")

    click.echo(f"Done! {len(info.resources)} resources, base URL {info.base_url}")
