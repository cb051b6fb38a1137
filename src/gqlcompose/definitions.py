"""Plain configuration records stored inside composers.

Field, argument and enum value entries are treated as immutable once stored:
every mutation replaces the entry with ``dataclasses.replace`` so clones can
share entries safely.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

from graphql import EnumValueDefinitionNode, FieldDefinitionNode, InputValueDefinitionNode, Undefined

from gqlcompose.errors import ComposerConfigError

if TYPE_CHECKING:
    from gqlcompose.composers.wrappers import Composer

DIRECTIVES_EXTENSION = "directives"


@dataclass(frozen=True)
class DirectiveUsage:
    """A directive applied to a type, field or value: ``@name(args)``."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class InputFieldConfig:
    """Input object field or output field argument."""

    type: "Composer"
    default_value: Any = Undefined
    description: str | None = None
    deprecation_reason: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)
    ast_node: InputValueDefinitionNode | None = None


@dataclass
class ObjectFieldConfig:
    """Field of an object or interface type."""

    type: "Composer"
    args: dict[str, InputFieldConfig] = field(default_factory=dict)
    resolve: Callable[..., Any] | None = None
    subscribe: Callable[..., Any] | None = None
    description: str | None = None
    deprecation_reason: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)
    ast_node: FieldDefinitionNode | None = None


@dataclass
class EnumValueConfig:
    # value=None means "use the value name" when the enum is materialized
    value: Any = None
    description: str | None = None
    deprecation_reason: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)
    ast_node: EnumValueDefinitionNode | None = None


FieldConfig = InputFieldConfig | ObjectFieldConfig | EnumValueConfig


def config_to_dict(config: FieldConfig) -> dict[str, Any]:
    """Shallow dict view of a config record (values are not copied)."""
    return {f.name: getattr(config, f.name) for f in fields(config)}


def normalize_directive(directive: Any) -> DirectiveUsage:
    """
    Convert a directive given as ``DirectiveUsage`` or ``{"name": ..., "args": {...}}``.

    Args:
        directive: The directive instance to normalize

    Returns:
        DirectiveUsage: The normalized directive

    Raises:
        ComposerConfigError: If the value has neither shape
    """
    if isinstance(directive, DirectiveUsage):
        return directive
    if isinstance(directive, Mapping) and isinstance(directive.get("name"), str):
        return DirectiveUsage(directive["name"].lstrip("@"), dict(directive.get("args") or {}))
    raise ComposerConfigError(f"Cannot use {directive!r} as a directive. Expected DirectiveUsage or a name/args mapping.")


def normalize_directives(directives: Sequence[Any] | None) -> list[DirectiveUsage]:
    return [normalize_directive(d) for d in directives or ()]


def directives_from_extensions(extensions: Mapping[str, Any] | None) -> list[DirectiveUsage]:
    """Read the directive list kept under the reserved extensions key; absence yields an empty list."""
    if not extensions:
        return []
    return normalize_directives(extensions.get(DIRECTIVES_EXTENSION))


def extensions_with_directives(
    extensions: Mapping[str, Any] | None, directives: Sequence[Any] | None
) -> dict[str, Any]:
    """Copy ``extensions`` and store ``directives`` under the reserved key (dropping it when empty)."""
    result = dict(extensions or {})
    normalized = normalize_directives(directives)
    if normalized:
        result[DIRECTIVES_EXTENSION] = normalized
    else:
        result.pop(DIRECTIVES_EXTENSION, None)
    return result


def directive_names(directives: Sequence[DirectiveUsage]) -> list[str]:
    return [d.name for d in directives]


def directive_by_name(directives: Sequence[DirectiveUsage], name: str) -> dict[str, Any] | None:
    """Arguments of the first directive called ``name``, or None."""
    for directive in directives:
        if directive.name == name:
            return directive.args
    return None


def directive_by_id(directives: Sequence[DirectiveUsage], index: int) -> dict[str, Any] | None:
    """Arguments of the directive at ``index``, or None when out of range."""
    if 0 <= index < len(directives):
        return directives[index].args
    return None
