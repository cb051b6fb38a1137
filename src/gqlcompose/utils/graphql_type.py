from graphql import specified_scalar_types

ROOT_TYPE_NAMES = ("Query", "Mutation", "Subscription")


def is_introspection_type(type_name: str) -> bool:
    return type_name.startswith("__")


def is_root_type(type_name: str) -> bool:
    return type_name in ROOT_TYPE_NAMES


def is_builtin_scalar_type(type_name: str) -> bool:
    return type_name in specified_scalar_types


def upper_first(value: str) -> str:
    """Uppercase the first character and keep the rest untouched ("fieldNested1" -> "FieldNested1")."""
    return value[:1].upper() + value[1:]
