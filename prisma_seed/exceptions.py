"""Custom exceptions with helpful error messages."""


class PrismaSeedError(Exception):
    """Base exception for prisma-seed errors."""

    pass


class SchemaReadError(PrismaSeedError):
    """Schema source could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(
            f"Could not read schema file '{path}': {reason}\n\n"
            f"Suggestions:\n"
            f"1. Check the schema path spelling\n"
            f"2. Ensure the file exists and is readable\n"
            f"3. Pass schema text directly with Seeder.from_schema(text, sink)"
        )


class SchemaParseError(PrismaSeedError):
    """A schema declaration could not be understood."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        location = f" (line {line})" if line is not None else ""
        super().__init__(f"{message}{location}")


class ConfigError(PrismaSeedError):
    """Invalid configuration or field override."""

    def __init__(self, message: str, model: str | None = None, field: str | None = None):
        self.model = model
        self.field = field
        if model and field:
            message = f"Invalid config for '{model}.{field}': {message}"
        super().__init__(message)


class ModelNotFoundError(PrismaSeedError):
    """Model does not exist in the parsed schema."""

    def __init__(self, model: str, available: list[str]):
        available_str = ", ".join(available) if available else "(none)"
        super().__init__(
            f"Model '{model}' not found in schema.\n\n"
            f"Available models: {available_str}\n\n"
            f"Suggestions:\n"
            f"1. Check model name spelling (names are case-sensitive)\n"
            f"2. Ensure the schema declares: model {model} {{ ... }}"
        )


class ReferentialIntegrityError(PrismaSeedError):
    """A required relation cannot be satisfied because no parent records exist."""

    def __init__(self, model: str, field: str, parent: str):
        self.model = model
        self.field = field
        self.parent = parent
        super().__init__(
            f"Cannot set required foreign key '{model}.{field}': "
            f"no '{parent}' records have been created.\n\n"
            f"Suggestions:\n"
            f"1. Seed '{parent}' before '{model}' (seed_all() does this for you)\n"
            f"2. Give '{parent}' a count greater than zero in the config\n"
            f"3. Provide an override: models.{model}.fields.{field}.defaultValue"
        )


class UniqueValueError(PrismaSeedError):
    """Could not generate a fresh value for a unique field."""

    def __init__(self, model: str, field: str, attempts: int = 0, parent: str | None = None):
        if parent is not None:
            super().__init__(
                f"Every '{parent}' record is already referenced by unique field "
                f"'{model}.{field}'.\n\n"
                f"Suggestions:\n"
                f"1. Seed at least as many '{parent}' records as '{model}' records\n"
                f"2. Make '{model}.{field}' optional so extra records leave it empty"
            )
            return
        super().__init__(
            f"Could not generate unique value for '{model}.{field}' "
            f"after {attempts} attempts.\n\n"
            f"Suggestions:\n"
            f"1. Widen the min/max range or add more values\n"
            f"2. Use a generator with more variety (e.g. 'internet.email')"
        )


class SinkError(PrismaSeedError):
    """The record sink rejected a write."""

    def __init__(self, model: str, reason: str):
        self.model = model
        self.reason = reason
        super().__init__(f"Failed to write '{model}' record: {reason}")
