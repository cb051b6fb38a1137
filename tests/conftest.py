from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from faker import Faker
from hypothesis import strategies as st
from hypothesis.strategies import composite

from gqlcompose.schema_composer import SchemaComposer

FIELD_NAME = st.from_regex(r"\A[a-z][a-zA-Z0-9]{0,7}\Z")


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    BLOG_SCHEMA_DIR: Path = TESTS_DATA_DIR / "blog"
    ACCOUNTS_SCHEMA: Path = BLOG_SCHEMA_DIR / "accounts.graphql"
    POSTS_SCHEMA: Path = BLOG_SCHEMA_DIR / "posts.graphql"
    EMPTY_TYPES_SCHEMA: Path = TESTS_DATA_DIR / "empty-types.graphql"
    BROKEN_SCHEMA: Path = TESTS_DATA_DIR / "broken.graphql"
    COMPOSE_CONFIG: Path = TESTS_DATA_DIR / "compose.yaml"


@pytest.fixture
def sc() -> SchemaComposer:
    """A fresh registry per test; nothing is shared between instances."""
    return SchemaComposer()


def make_info(context: Any = None) -> Any:
    """Minimal stand-in for GraphQLResolveInfo: the compiled hooks only read ``context``."""
    return SimpleNamespace(context=context)


@composite
def field_names_strategy(
    draw: Callable[[st.SearchStrategy[Any]], Any],
    min_size: int = 1,
    max_size: int = 8,
) -> list[str]:
    """Generate a list of unique GraphQL field names."""
    return draw(st.lists(FIELD_NAME, min_size=min_size, max_size=max_size, unique=True))


@composite
def reorder_case_strategy(
    draw: Callable[[st.SearchStrategy[Any]], Any],
) -> tuple[list[str], list[str]]:
    """Generate existing field names plus a reorder request mixing known and unknown names."""
    names = draw(field_names_strategy())
    known = draw(st.lists(st.sampled_from(names), unique=True))
    unknown = draw(st.lists(FIELD_NAME.filter(lambda name: name not in names), max_size=3, unique=True))
    request = draw(st.permutations(known + unknown))
    return names, list(request)


def fake_type_name(faker: Faker) -> str:
    """Random PascalCase type name, e.g. ``BlueHorse``."""
    return "".join(word.capitalize() for word in faker.unique.words(2) if word.isalpha()) or "Generated"
