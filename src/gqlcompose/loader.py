from pathlib import Path

from ariadne import load_schema_from_path

from gqlcompose import log
from gqlcompose.schema_composer import SchemaComposer


def resolve_graphql_files(paths: list[Path]) -> list[Path]:
    """Resolve a list of paths (files and directories) into a flat list of unique GraphQL files.

    Args:
        paths: List of file or directory paths

    Returns:
        Flat list of unique GraphQL file paths (deduplicated and sorted)
    """
    resolved_files: set[Path] = set()

    for path in paths:
        if path.is_file():
            resolved_files.add(path)
        elif path.is_dir():
            for file in path.rglob("*.graphql"):
                resolved_files.add(file)

    return sorted(resolved_files)


def load_sdl(graphql_file: Path) -> str:
    """Read one SDL file; ariadne rejects files with syntax errors (GraphQLFileSyntaxError)."""
    return load_schema_from_path(graphql_file)


def compose_from_paths(paths: list[Path], schema_composer: SchemaComposer | None = None) -> SchemaComposer:
    """
    Feed every GraphQL file below ``paths`` into a registry, in sorted file order.

    Args:
        paths: Files or directories holding ``.graphql`` files
        schema_composer: Registry to extend (a new one when omitted)

    Returns:
        SchemaComposer: The registry holding the loaded types
    """
    sc = schema_composer if schema_composer is not None else SchemaComposer()
    for graphql_file in resolve_graphql_files(paths):
        added = sc.add_type_defs(load_sdl(graphql_file))
        log.debug(f"Loaded {len(added)} types from {graphql_file}")
    return sc
