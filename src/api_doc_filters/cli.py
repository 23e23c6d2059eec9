"""CLI entry point for api-doc-filters."""

import json
import logging
from pathlib import Path

import click

from api_doc_filters.client.bridge import generate_client_document
from api_doc_filters.config import DocumentationBuilder, DocumentationConfig, load_config
from api_doc_filters.errors import DocumentationError
from api_doc_filters.model.loader import file_provider
from api_doc_filters.pipeline.generator import DocumentGenerator
from api_doc_filters.ui import use_documentation


def _config_options(func):
    """Options shared by every command that registers the documentation pipeline."""
    options = [
        click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML documentation config."),
        click.option("--token-url", default=None, help="OAuth2 token endpoint (required unless set in the config)."),
        click.option("--title", default=None, help="API title."),
        click.option("--api-version", default=None, help="API version, also the document name."),
        click.option("--ignore", "ignored", multiple=True, help="Parameter name to remove from every operation."),
        click.option("-v", "--verbose", is_flag=True, help="Log every filter application."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_generator(doc_path: Path, config_path: Path | None, token_url: str | None, title: str | None,
                     api_version: str | None, ignored: tuple[str, ...], verbose: bool) -> tuple[DocumentationBuilder, DocumentGenerator]:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    config = load_config(config_path) if config_path else DocumentationConfig()
    overrides = {}
    if token_url:
        overrides["token_url"] = token_url
    if title:
        overrides["api_title"] = title
    if api_version:
        overrides["api_version"] = api_version
    if ignored:
        overrides["ignored_parameter_names"] = [*config.ignored_parameter_names, *ignored]

    builder = DocumentationBuilder()
    builder.register(config, **overrides)
    return builder, DocumentGenerator(builder, file_provider(doc_path))


@click.group()
def main():
    """API Doc Filters: post-process generated OpenAPI documents."""
    pass


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the filtered OpenAPI JSON.")
@click.option("--document", "document_name", default=None, help="Document name to generate (defaults to the API version).")
@_config_options
def generate(doc_path: Path, output: Path, document_name: str | None, config_path: Path | None, token_url: str | None,
             title: str | None, api_version: str | None, ignored: tuple[str, ...], verbose: bool):
    """Apply the documentation filters to an OpenAPI document."""
    click.echo(f"Filtering {doc_path}...")
    try:
        _, generator = _build_generator(doc_path, config_path, token_url, title, api_version, ignored, verbose)
        text = generator.generate_json(document_name)
    except DocumentationError as e:
        raise click.ClickException(str(e)) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Filtered document saved to {output}")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the client endpoint list (JSON).")
@_config_options
def client(doc_path: Path, output: Path, config_path: Path | None, token_url: str | None, title: str | None,
           api_version: str | None, ignored: tuple[str, ...], verbose: bool):
    """Convert the filtered document into the client-generation dialect."""
    click.echo(f"Converting {doc_path}...")
    try:
        _, generator = _build_generator(doc_path, config_path, token_url, title, api_version, ignored, verbose)
        client_doc = generate_client_document(generator)
    except DocumentationError as e:
        raise click.ClickException(str(e)) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(client_doc.model_dump_json(indent=2), encoding="utf-8")
    click.echo(f"Found {len(client_doc.endpoints)} endpoints. Saved to {output}")


@main.command("ui-config")
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@_config_options
def ui_config(doc_path: Path, config_path: Path | None, token_url: str | None, title: str | None,
              api_version: str | None, ignored: tuple[str, ...], verbose: bool):
    """Warm up generation and print the swagger-ui configuration."""
    try:
        builder, generator = _build_generator(doc_path, config_path, token_url, title, api_version, ignored, verbose)
        settings = use_documentation(builder, generator)
    except DocumentationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(settings.to_config(), indent=2))
