import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
import yaml
from ariadne.exceptions import GraphQLFileSyntaxError
from graphql import GraphQLError, print_schema
from pydantic import ValidationError
from rich.traceback import install

from gqlcompose import __version__, log
from gqlcompose.composers import (
    EnumTypeComposer,
    InputTypeComposer,
    InterfaceTypeComposer,
    ObjectTypeComposer,
    ScalarTypeComposer,
    UnionTypeComposer,
)
from gqlcompose.composers.fields import FieldsMixin
from gqlcompose.config import load_compose_config
from gqlcompose.loader import compose_from_paths, resolve_graphql_files
from gqlcompose.schema_composer import SchemaComposer
from gqlcompose.utils.graphql_type import is_builtin_scalar_type

KIND_LABELS: tuple[tuple[type, str], ...] = (
    (ObjectTypeComposer, "object"),
    (InputTypeComposer, "input_object"),
    (EnumTypeComposer, "enum"),
    (ScalarTypeComposer, "scalar"),
    (InterfaceTypeComposer, "interface"),
    (UnionTypeComposer, "union"),
)


class PathResolverOption(click.Option):
    def process_value(self, ctx: click.Context, value: Any) -> list[Path] | None:
        value = super().process_value(ctx, value)
        if not value:
            return None
        paths = set(value)
        return resolve_graphql_files(list(paths))


def schema_option(required: bool = True) -> Any:
    return click.option(
        "--schema",
        "-s",
        "schemas",
        type=click.Path(exists=True, path_type=Path),
        cls=PathResolverOption,
        required=required,
        multiple=True,
        help="The GraphQL schema file or directory containing schema files. Can be specified multiple times.",
    )


output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=True,
    help="Output file",
)


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file containing the compose configuration",
)


def count_types(sc: SchemaComposer) -> dict[str, Any]:
    """Count registered composers by kind; custom scalars are also listed by name."""
    type_counts: dict[str, Any] = {label: 0 for _, label in KIND_LABELS}
    type_counts["custom_scalars"] = []
    for name, tc in sc.items():
        for composer_class, label in KIND_LABELS:
            if isinstance(tc, composer_class):
                type_counts[label] += 1
                break
        if isinstance(tc, ScalarTypeComposer) and not is_builtin_scalar_type(name):
            type_counts["custom_scalars"].append(name)
    return type_counts


@click.group(context_settings={"auto_envvar_prefix": "gqlcompose"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@click.command()
@schema_option(required=False)
@config_option
@click.option(
    "--remove-empty-types",
    is_flag=True,
    default=None,
    help="Remove fields whose object type has no fields before building",
)
@click.option(
    "--must-have",
    "must_have_types",
    multiple=True,
    help="Type name to include even when unreferenced. Can be specified multiple times.",
)
@output_option
def compose(
    schemas: list[Path] | None,
    config_path: Path | None,
    remove_empty_types: bool | None,
    must_have_types: tuple[str, ...],
    output: Path,
) -> None:
    """Compose GraphQL schema files into a single output file."""
    try:
        config = load_compose_config(config_path).with_overrides(
            schemas=schemas, must_have_types=list(must_have_types), remove_empty_types=remove_empty_types
        )
        if not config.schemas:
            raise click.UsageError("Provide at least one schema with --schema or in the config file.")

        sc = compose_from_paths(config.schemas)

        for name in config.must_have_types:
            sc.add_schema_must_have_type(sc.get(name))
        if config.remove_empty_types:
            for name in config.prune_from:
                if name in sc:
                    sc.remove_empty_types(sc.get(name))  # type: ignore[arg-type]

        schema = sc.build_schema()
        output.write_text(print_schema(schema))

        log.success(f"Successfully composed {len(sc)} types to {output}")

    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)
    except (GraphQLFileSyntaxError, GraphQLError) as e:
        log.error(f"Invalid schema: {e}")
        sys.exit(1)
    except (ValidationError, yaml.YAMLError, TypeError) as e:
        log.error(f"Invalid configuration: {e}")
        sys.exit(1)
    except ValueError as e:
        log.error(f"Invalid schema: {e}")
        sys.exit(1)


@click.command()
@schema_option()
def stats(schemas: list[Path]) -> None:
    """Count the types of a schema by kind."""
    try:
        sc = compose_from_paths(schemas)
    except (GraphQLFileSyntaxError, GraphQLError, ValueError) as e:
        log.error(f"Invalid schema: {e}")
        sys.exit(1)

    type_counts = count_types(sc)
    log.rule("GraphQL Schema Type Counts")
    log.print_dict(type_counts)

    query = sc.get("Query") if "Query" in sc else None
    if isinstance(query, FieldsMixin):
        log.key_value("Query fields", len(query.get_field_names()))
    log.key_value("Directives", ", ".join(f"@{d.name}" for d in sc.get_directives()))


cli.add_command(compose)
cli.add_command(stats)

if __name__ == "__main__":
    cli()
