from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from gqlcompose import log
from gqlcompose.composers.base import NAME_PATTERN


class ComposeConfig(BaseModel):
    """Settings of a ``gqlcompose compose`` run, usually read from YAML."""

    model_config = ConfigDict(extra="forbid")

    schemas: list[Path] = Field(default_factory=list)
    must_have_types: list[str] = Field(default_factory=list)
    remove_empty_types: bool = False
    prune_from: list[str] = Field(default_factory=lambda: ["Query"])

    @field_validator("must_have_types", "prune_from")
    @classmethod
    def validate_type_names(cls, value: list[str]) -> list[str]:
        for name in value:
            if not NAME_PATTERN.match(name):
                raise ValueError(f"'{name}' is not a valid GraphQL type name")
        return value

    def with_overrides(
        self,
        schemas: list[Path] | None = None,
        must_have_types: list[str] | None = None,
        remove_empty_types: bool | None = None,
    ) -> "ComposeConfig":
        """Layer CLI options on top: given schemas and must-have types are appended, flags win when set."""
        return self.model_copy(
            update={
                "schemas": [*self.schemas, *(schemas or [])],
                "must_have_types": [*self.must_have_types, *(must_have_types or [])],
                "remove_empty_types": self.remove_empty_types if remove_empty_types is None else remove_empty_types,
            }
        )


def load_compose_config(config_path: Path | None) -> ComposeConfig:
    """
    Load and validate a compose configuration from a YAML file.

    Relative ``schemas`` entries are resolved against the directory of the file.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.

    Returns:
        A validated ComposeConfig.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        TypeError: If the YAML root is not a mapping.
        ValidationError: If validation against ComposeConfig fails.
    """
    if config_path is None:
        log.debug("No compose config provided")
        return ComposeConfig()

    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug("Loaded compose config from %s", config_path)

    # Treat empty file or explicit YAML null as "defaults"
    if raw is None or raw == {}:
        return ComposeConfig()

    if not isinstance(raw, dict):
        raise TypeError(f"Compose config root must be a mapping (YAML object), got {type(raw).__name__}")

    config = ComposeConfig.model_validate(cast(dict[str, Any], raw))
    base_dir = config_path.parent
    config.schemas = [path if path.is_absolute() else base_dir / path for path in config.schemas]
    return config
