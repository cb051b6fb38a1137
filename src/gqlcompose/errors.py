class ComposeError(ValueError):
    """Base class for every error raised while composing a schema."""


class ComposerConfigError(ComposeError):
    """Wrong constructor arguments or a type definition of unrecognized shape."""


class TypeLookupError(ComposeError):
    """A type name is absent from the registry or registered under another kind."""


class FieldNotFoundError(ComposeError):
    """A field operation targets a field the composer does not have."""


class MergeConflictError(ComposeError):
    """Two types with the same name but of different kinds were combined."""


class SchemaBuildError(ComposeError):
    """The registry cannot be materialized into a schema."""
