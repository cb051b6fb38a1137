from gqlcompose.logger import get_logger

__author__ = """gqlcompose contributors"""
__version__ = "0.1.0"

log = get_logger("gqlcompose")

from gqlcompose.composers import (  # noqa: E402
    EnumTypeComposer,
    InputTypeComposer,
    InterfaceTypeComposer,
    ListComposer,
    NonNullComposer,
    ObjectTypeComposer,
    ScalarTypeComposer,
    ThunkComposer,
    UnionTypeComposer,
)
from gqlcompose.definitions import (  # noqa: E402
    DirectiveUsage,
    EnumValueConfig,
    InputFieldConfig,
    ObjectFieldConfig,
)
from gqlcompose.directives import BUILT_IN_DIRECTIVES, GraphQLDefaultDirective, GraphQLJSON  # noqa: E402
from gqlcompose.errors import (  # noqa: E402
    ComposeError,
    ComposerConfigError,
    FieldNotFoundError,
    MergeConflictError,
    SchemaBuildError,
    TypeLookupError,
)
from gqlcompose.schema_composer import SchemaComposer, schema_composer  # noqa: E402

__all__ = [
    "BUILT_IN_DIRECTIVES",
    "ComposeError",
    "ComposerConfigError",
    "DirectiveUsage",
    "EnumTypeComposer",
    "EnumValueConfig",
    "FieldNotFoundError",
    "GraphQLDefaultDirective",
    "GraphQLJSON",
    "InputFieldConfig",
    "InputTypeComposer",
    "InterfaceTypeComposer",
    "ListComposer",
    "MergeConflictError",
    "NonNullComposer",
    "ObjectFieldConfig",
    "ObjectTypeComposer",
    "ScalarTypeComposer",
    "SchemaBuildError",
    "SchemaComposer",
    "ThunkComposer",
    "TypeLookupError",
    "UnionTypeComposer",
    "log",
    "schema_composer",
]
