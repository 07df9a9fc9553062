"""
Configuration management for prisma-seed.

Loads and validates seeder configuration from TOML, JSON or YAML files using
Pydantic, and merges per-field overrides with schema-derived defaults.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Literal, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from prisma_seed.exceptions import ConfigError
from prisma_seed.models import SchemaField

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "prisma-seed.toml"

GeneratorType = Literal["string", "number", "date", "boolean", "enum", "relation"]

INTEGER_TYPES = {"Int", "BigInt"}
DATE_TYPES = {"DateTime", "Date"}
UNIQUE_ID_DEFAULTS = {"uuid", "cuid", "nanoid", "ulid"}


class _CamelModel(BaseModel):
    """Accept both camelCase (JSON-style) and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class FieldConfig(_CamelModel):
    """Override for a single field of a single model."""

    type: Optional[GeneratorType] = Field(default=None, description="Force generator type")
    generator: Optional[str] = Field(
        default=None, description="Named generator (e.g. 'internet.email')"
    )
    min: Optional[float] = Field(default=None, description="Inclusive lower bound")
    max: Optional[float] = Field(default=None, description="Inclusive upper bound")
    pattern: Optional[str] = Field(
        default=None, description="Template: '#' is a digit, '?' is a letter"
    )
    values: Optional[list[Any]] = Field(default=None, description="Candidate values")
    ignore: bool = Field(default=False, description="Skip this field entirely")
    default_value: Any = Field(default=None, description="Literal value for every record")
    integer: bool = Field(default=False, description="Restrict numbers to integers")

    def has_default(self) -> bool:
        """Check if a literal default was explicitly given."""
        return "default_value" in self.model_fields_set


class RelationConfig(_CamelModel):
    """Override for a relation or foreign key field."""

    model: Optional[str] = Field(default=None, description="Parent model to draw ids from")
    min: Optional[int] = Field(default=None, description="Minimum related records")
    max: Optional[int] = Field(default=None, description="Maximum related records")
    cascade: bool = Field(default=False, description="Cascade deletes on reset")


class ModelConfig(_CamelModel):
    """Per-model configuration."""

    count: Optional[int] = Field(default=None, ge=0, description="Records to create")
    fields: dict[str, FieldConfig] = Field(default_factory=dict)
    relations: dict[str, RelationConfig] = Field(default_factory=dict)


class GlobalConfig(BaseSettings):
    """Run-wide flags (the ``global`` section)."""

    model_config = SettingsConfigDict(env_prefix="PRISMA_SEED_")

    reset: bool = Field(default=False, description="Delete existing data before seeding")
    incremental: bool = Field(
        default=False, description="Add to existing data (disables reset)"
    )
    randomize: bool = Field(
        default=True, description="Non-deterministic generation (False seeds the RNG)"
    )
    seed: int = Field(default=0, description="RNG seed used when randomize is False")
    default_count: int = Field(default=10, ge=0, description="Count for unconfigured models")


class SeederConfig(BaseSettings):
    """Main configuration for prisma-seed."""

    model_config = SettingsConfigDict(env_prefix="PRISMA_SEED_", populate_by_name=True)

    models: dict[str, ModelConfig] = Field(default_factory=dict)
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SeederConfig:
        """
        Build configuration from a plain mapping.

        The ``global`` section is layered over the PRISMA_SEED_* environment
        variables: keys present in the mapping win, the rest come from the
        environment, then the defaults.

        Raises:
            ConfigError: If the mapping does not describe a valid configuration
        """
        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Invalid configuration: expected a mapping, got {data!r}")
        data = dict(data or {})
        options = data.pop("global", None)
        if options is None:
            options = data.pop("global_", None)
        if options is not None and not isinstance(options, dict):
            raise ConfigError(f"Invalid configuration: 'global' must be a table, got {options!r}")

        try:
            if options is not None:
                data["global"] = GlobalConfig(**options)
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration:\n{e}") from e

    @classmethod
    def from_toml(cls, path: Path | str) -> SeederConfig:
        """
        Load configuration from TOML file.

        Args:
            path: Path to prisma-seed.toml file

        Returns:
            SeederConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If config file is invalid
        """
        config_path = _existing(path)
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_json(cls, path: Path | str) -> SeederConfig:
        """Load configuration from JSON file (same errors as from_toml)."""
        config_path = _existing(path)
        try:
            data = json.loads(config_path.read_text())
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> SeederConfig:
        """Load configuration from YAML file (same errors as from_toml)."""
        config_path = _existing(path)
        try:
            data = yaml.safe_load(config_path.read_text())
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Path | str) -> SeederConfig:
        """
        Load configuration, choosing the format from the file suffix.

        A missing file is not an error: defaults are returned.

        Raises:
            ConfigError: If the suffix is unsupported or the content is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}; using defaults")
            return cls()

        suffix = config_path.suffix.lower()
        if suffix == ".toml":
            return cls.from_toml(config_path)
        if suffix == ".json":
            return cls.from_json(config_path)
        if suffix in (".yaml", ".yml"):
            return cls.from_yaml(config_path)
        raise ConfigError(f"Unsupported config format '{suffix}' (use .toml, .json or .yaml)")

    @classmethod
    def find_and_load(cls, start_dir: Optional[Path] = None) -> SeederConfig:
        """
        Find and load configuration from prisma-seed.toml.

        Searches for prisma-seed.toml starting from start_dir and walking up
        parent directories until found or reaching filesystem root.

        Args:
            start_dir: Directory to start search (defaults to current directory)

        Returns:
            SeederConfig instance

        Raises:
            FileNotFoundError: If no config file found
        """
        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()

        while True:
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return cls.from_toml(config_path)

            parent = current.parent
            if parent == current:
                break
            current = parent

        raise FileNotFoundError(
            f"No {CONFIG_FILENAME} found in {start_dir} or parent directories. "
            f"Run 'prisma-seed init' to create one."
        )

    def to_toml(self, path: Path | str) -> None:
        """
        Write the global section as a starter TOML file.

        Args:
            path: Path to write prisma-seed.toml
        """
        options = self.global_
        toml_content = f"""# prisma-seed configuration

[global]
reset = {str(options.reset).lower()}
incremental = {str(options.incremental).lower()}
randomize = {str(options.randomize).lower()}
seed = {options.seed}
default_count = {options.default_count}

# Per-model overrides, for example:
# [models.User]
# count = 50
#
# [models.User.fields.email]
# generator = "internet.email"
#
# [models.User.fields.age]
# min = 18
# max = 65
"""
        Path(path).write_text(toml_content)

    def get_model_config(self, model: str) -> ModelConfig:
        """Get a model's configuration (empty when not configured)."""
        return self.models.get(model) or ModelConfig()

    def count_for(self, model: str) -> int:
        """Get the configured record count for a model, or the global default."""
        count = self.get_model_config(model).count
        return self.global_.default_count if count is None else count


def _existing(path: Path | str) -> Path:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    return config_path


def schema_field_defaults(schema_field: SchemaField) -> dict[str, Any]:
    """
    Derive generator settings implied by the schema alone.

    DateTime fields generate dates, Int/BigInt fields generate integers,
    uuid()/cuid() defaults generate UUIDs and enum fields draw from their
    declared members.
    """
    defaults: dict[str, Any] = {}

    if schema_field.native_type in DATE_TYPES:
        defaults["type"] = "date"
    elif schema_field.type in ("string", "number", "boolean", "enum", "relation"):
        defaults["type"] = schema_field.type

    if schema_field.native_type in INTEGER_TYPES:
        defaults["integer"] = True
    if schema_field.type == "string" and schema_field.default_function in UNIQUE_ID_DEFAULTS:
        defaults["generator"] = "uuid4"
    if schema_field.enum_values:
        defaults["values"] = list(schema_field.enum_values)

    return defaults


def merge_field_config(
    schema_field: SchemaField,
    model_config: ModelConfig | None = None,
    model: str | None = None,
) -> FieldConfig:
    """
    Build the effective configuration for one field of one model.

    Precedence, lowest to highest:

    1. schema: type (DateTime refined to date), integer-ness, id generator
       and enum values, see schema_field_defaults()
    2. model: keys the user actually set in ``models.<Model>.fields.<field>``

    Args:
        schema_field: Parsed schema field
        model_config: The model's configuration (None for no overrides)
        model: Model name, used in error messages

    Returns:
        Effective FieldConfig

    Raises:
        ConfigError: If the effective min is greater than the effective max
    """
    merged = schema_field_defaults(schema_field)

    override = model_config.fields.get(schema_field.name) if model_config else None
    if override is not None:
        merged.update(override.model_dump(exclude_unset=True))

    effective = FieldConfig(**merged)
    if effective.min is not None and effective.max is not None and effective.min > effective.max:
        raise ConfigError(
            f"min ({effective.min:g}) is greater than max ({effective.max:g})",
            model=model,
            field=schema_field.name,
        )
    return effective
