"""Seeder: generate records per model in dependency order and write them to a sink."""

import logging
import threading
from pathlib import Path
from typing import Any

from faker import Faker

from prisma_seed.backends.base import RecordSink
from prisma_seed.config import FieldConfig, ModelConfig, SeederConfig, merge_field_config
from prisma_seed.dependency import resolve_seed_order
from prisma_seed.exceptions import (
    ConfigError,
    ModelNotFoundError,
    ReferentialIntegrityError,
    SinkError,
    UniqueValueError,
)
from prisma_seed.generators import build_generators
from prisma_seed.models import GeneratedRecords, SchemaField, SchemaModel, SeedResult
from prisma_seed.schema import load_schema, parse_schema

logger = logging.getLogger(__name__)

# Constants for generation logic
MAX_UNIQUE_RETRIES = 10  # Maximum attempts to generate unique value
LIST_SIZE_RANGE = (1, 3)  # Values generated for scalar list fields


class Seeder:
    """
    Generate fake records for parsed models and submit them to a record sink.

    Parent identifiers created during a run are retained so later models can
    point their foreign keys at real records.

    Example:
        >>> sink = MemorySink()
        >>> seeder = Seeder.from_schema(schema_text, sink)
        >>> seeder.seed("User", 3)
        SeedResult(model='User', count=3, success=True, error=None)
        >>> results = seeder.seed_all()
    """

    def __init__(
        self,
        models: list[SchemaModel],
        sink: RecordSink,
        config: SeederConfig | None = None,
        faker: Faker | None = None,
    ):
        """
        Initialize Seeder.

        Args:
            models: Parsed schema models
            sink: Record sink receiving generated records
            config: Seeder configuration (defaults apply when None)
            faker: Faker instance (a fresh one when None)
        """
        self.models = list(models)
        self.sink = sink
        self.config = config or SeederConfig()
        self.fake = faker if faker is not None else Faker()

        options = self.config.global_
        if not options.randomize:
            self.fake.seed_instance(options.seed)

        self.generators = build_generators(self.fake)
        self._models_by_name = {model.name: model for model in self.models}
        self._created = GeneratedRecords()
        self._unique_values: dict[tuple[str, str], set[Any]] = {}
        self._referenced_fields = self._collect_referenced_fields()

        for name in self.config.models:
            if name not in self._models_by_name:
                logger.warning(f"Config references model '{name}' which is not in the schema")

    @classmethod
    def from_schema(
        cls,
        schema_text: str,
        sink: RecordSink,
        config: SeederConfig | None = None,
        faker: Faker | None = None,
    ) -> "Seeder":
        """Build a seeder from schema text."""
        return cls(parse_schema(schema_text), sink, config=config, faker=faker)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        sink: RecordSink,
        config: SeederConfig | None = None,
        faker: Faker | None = None,
    ) -> "Seeder":
        """
        Build a seeder from a schema file.

        Raises:
            SchemaReadError: If the schema file cannot be read
        """
        return cls(load_schema(path), sink, config=config, faker=faker)

    def get_models(self) -> list[SchemaModel]:
        """Get parsed models in declaration order."""
        return list(self.models)

    def get_model(self, name: str) -> SchemaModel:
        """
        Get a model by name.

        Raises:
            ModelNotFoundError: If the schema has no such model
        """
        if name not in self._models_by_name:
            raise ModelNotFoundError(name, list(self._models_by_name))
        return self._models_by_name[name]

    def seed_order(self) -> list[str]:
        """Get model names in the order seed_all() processes them."""
        return [model.name for model in resolve_seed_order(self.models)]

    def reset(self) -> None:
        """
        Delete existing records of every model, children first.

        Failures are logged and do not stop the reset of other models.
        """
        for name in reversed(self.seed_order()):
            try:
                removed = self.sink.delete_all(name)
            except SinkError as e:
                logger.error(f"Reset failed for '{name}': {e}")
                continue
            logger.info(f"Removed {removed} existing '{name}' records")

        self._created.clear()
        self._unique_values.clear()

    def seed_all(self, cancel_event: threading.Event | None = None) -> list[SeedResult]:
        """
        Seed every model in dependency order.

        Counts come from the configuration (``models.<Model>.count``, else
        ``global.default_count``). One model failing never stops the run.

        Args:
            cancel_event: Checked between models; when set, remaining models are skipped

        Returns:
            One SeedResult per seeded model, in seeding order
        """
        options = self.config.global_
        if not options.incremental:
            self._created.clear()
            self._unique_values.clear()
            if options.reset:
                self.reset()

        results = []
        for model in resolve_seed_order(self.models):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Seeding cancelled before '{model.name}'")
                break
            results.append(self.seed(model.name, self.config.count_for(model.name)))

        return results

    def seed(self, model_name: str, count: int | None = None) -> SeedResult:
        """
        Create ``count`` records for one model.

        Each record failure (missing parent, unique exhaustion, sink rejection)
        is logged and counted; the remaining records are still attempted.

        Args:
            model_name: Model to seed
            count: Records to create (configured count when None)

        Returns:
            SeedResult with the number of records actually created

        Raises:
            ModelNotFoundError: If the schema has no such model
        """
        model = self.get_model(model_name)
        if count is None:
            count = self.config.count_for(model_name)

        model_config = self.config.get_model_config(model_name)
        field_configs = self._effective_configs(model, model_config)

        created = 0
        last_error: str | None = None

        for instance in range(1, count + 1):
            try:
                record = self._build_record(model, model_config, field_configs, instance)
                identifier = self._submit(model, record)
            except (ReferentialIntegrityError, UniqueValueError, SinkError) as e:
                last_error = str(e)
                logger.error(f"Record {instance}/{count} for '{model.name}' failed: {e}")
                continue

            created += 1
            self._claim_unique(model, record)
            self._retain(model, record, identifier)

        logger.info(f"Seeded {created}/{count} '{model.name}' records")
        return SeedResult(
            model=model.name,
            count=created,
            success=created > 0 or count == 0,
            error=last_error,
        )

    def _effective_configs(
        self, model: SchemaModel, model_config: ModelConfig
    ) -> dict[str, FieldConfig]:
        """Merge configs for every stored field; invalid overrides skip the field."""
        configs = {}
        for schema_field in model.fields:
            if schema_field.is_relation:
                continue
            try:
                configs[schema_field.name] = merge_field_config(
                    schema_field, model_config, model=model.name
                )
            except ConfigError as e:
                logger.warning(f"Skipping field: {e}")
        return configs

    def _build_record(
        self,
        model: SchemaModel,
        model_config: ModelConfig,
        field_configs: dict[str, FieldConfig],
        instance: int,
    ) -> dict[str, Any]:
        """
        Assemble one record.

        Raises:
            ReferentialIntegrityError: If a required parent has no records
            UniqueValueError: If a unique field ran out of fresh values
        """
        record: dict[str, Any] = {}

        for schema_field in model.fields:
            config = field_configs.get(schema_field.name)
            if config is None or config.ignore:
                continue

            if config.has_default():
                record[schema_field.name] = config.default_value
                continue

            parent = self._parent_model(model, schema_field, config, model_config)
            if parent is not None:
                value = self._pick_parent_value(model, schema_field, parent)
                if value is not None:
                    record[schema_field.name] = value
                continue

            if schema_field.is_generated_by_store:
                continue

            try:
                value = self._generate_value(model, schema_field, config, instance, record)
            except ConfigError as e:
                logger.warning(f"Skipping field '{model.name}.{schema_field.name}': {e}")
                continue

            if value is None:
                # Unresolvable (e.g. enum without values): fall back to the schema default
                if schema_field.default_value is not None:
                    record[schema_field.name] = schema_field.default_value
                continue
            record[schema_field.name] = value

        return record

    def _parent_model(
        self,
        model: SchemaModel,
        schema_field: SchemaField,
        config: FieldConfig,
        model_config: ModelConfig,
    ) -> str | None:
        """Parent model a foreign key draws from, or None to generate a plain value."""
        if not (schema_field.is_foreign_key or config.type == "relation"):
            return None

        parent = schema_field.relation_model
        relation_config = model_config.relations.get(schema_field.name)
        if relation_config is None:
            for relation in model.relations:
                fk_columns = [c.strip() for c in (relation.foreign_key or "").split(",")]
                if schema_field.name in fk_columns and relation.name in model_config.relations:
                    relation_config = model_config.relations[relation.name]
                    break
        if relation_config is not None and relation_config.model:
            parent = relation_config.model

        if parent is None or parent not in self._models_by_name:
            # Unresolved or external reference: treated as satisfied
            return None
        return parent

    def _pick_parent_value(
        self, model: SchemaModel, schema_field: SchemaField, parent: str
    ) -> Any:
        """
        Pick a created parent's identifier at random.

        A unique foreign key (one-to-one relation) only draws parents that no
        earlier record of this model points at.

        Raises:
            ReferentialIntegrityError: If the field is required and no parent exists
            UniqueValueError: If the field is required, unique and every parent is taken
        """
        parent_pk = self._models_by_name[parent].primary_key
        key = schema_field.relation_field or (parent_pk.name if parent_pk else None)
        rows = self._created.get(parent)
        candidates = [row.get(key) for row in rows] if key else []
        candidates = [value for value in candidates if value is not None]

        if not candidates:
            if schema_field.is_required:
                raise ReferentialIntegrityError(model.name, schema_field.name, parent)
            return None

        if self._is_unique(model, schema_field):
            used = self._unique_values.get((model.name, schema_field.name), set())
            candidates = [value for value in candidates if value not in used]
            if not candidates:
                if schema_field.is_required:
                    raise UniqueValueError(model.name, schema_field.name, parent=parent)
                return None

        return self.fake.random.choice(candidates)

    def _generate_value(
        self,
        model: SchemaModel,
        schema_field: SchemaField,
        config: FieldConfig,
        instance: int,
        record: dict[str, Any],
    ) -> Any:
        """
        Run the generator for one field, retrying unique fields on collision.

        Raises:
            ConfigError: If the field's configuration cannot be satisfied
            UniqueValueError: If no fresh value was found for a unique field
        """
        type_name = config.type or schema_field.type
        generator = self.generators.get(type_name) or self.generators["string"]
        context = {"instance": instance, "record": record, "model": model}

        def produce() -> Any:
            if schema_field.is_list:
                size = self.fake.random_int(*LIST_SIZE_RANGE)
                values = [
                    generator.generate(schema_field.name, config, **context) for _ in range(size)
                ]
                return [v for v in values if v is not None] or None
            return generator.generate(schema_field.name, config, **context)

        value = produce()
        if not self._is_unique(model, schema_field) or not _claimable(value):
            return value

        # Values are claimed in _claim_unique once the sink accepts the record
        seen = self._unique_values.get((model.name, schema_field.name), set())
        retries = 0
        while value in seen:
            retries += 1
            if retries >= MAX_UNIQUE_RETRIES:
                raise UniqueValueError(model.name, schema_field.name, MAX_UNIQUE_RETRIES)
            value = produce()

        return value

    def _is_unique(self, model: SchemaModel, schema_field: SchemaField) -> bool:
        """Check if a field must hold distinct values (composite key parts need not)."""
        if schema_field.is_unique:
            return True
        if not schema_field.is_primary_key:
            return False
        return sum(1 for f in model.fields if f.is_primary_key) == 1

    def _claim_unique(self, model: SchemaModel, record: dict[str, Any]) -> None:
        """Mark a stored record's unique values as used."""
        for schema_field in model.fields:
            value = record.get(schema_field.name)
            if self._is_unique(model, schema_field) and _claimable(value):
                self._unique_values.setdefault((model.name, schema_field.name), set()).add(value)

    def _submit(self, model: SchemaModel, record: dict[str, Any]) -> Any:
        """
        Hand a record to the sink.

        Raises:
            SinkError: For any failure raised by the sink
        """
        try:
            return self.sink.create(model.name, record)
        except SinkError:
            raise
        except Exception as e:
            raise SinkError(model.name, f"{type(e).__name__}: {e}") from e

    def _retain(self, model: SchemaModel, record: dict[str, Any], identifier: Any) -> None:
        """Remember a created record's key values for later foreign keys."""
        pk = model.primary_key
        keys = self._referenced_fields.get(model.name, set())
        if pk is None and not keys:
            return

        row = {key: record.get(key) for key in keys}
        if pk is not None:
            row[pk.name] = record.get(pk.name) if record.get(pk.name) is not None else identifier
        self._created.add(model.name, row)

    def _collect_referenced_fields(self) -> dict[str, set[str]]:
        """Map each parent model to the fields other models reference."""
        referenced: dict[str, set[str]] = {}
        for model in self.models:
            for fk in model.foreign_keys:
                if fk.relation_model and fk.relation_field:
                    referenced.setdefault(fk.relation_model, set()).add(fk.relation_field)
        return referenced


def _claimable(value: Any) -> bool:
    return value is not None and not isinstance(value, (list, dict))
