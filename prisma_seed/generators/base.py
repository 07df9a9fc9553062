"""Base generator interface."""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

from faker import Faker

from prisma_seed.config import FieldConfig
from prisma_seed.generators.registry import get_generator

logger = logging.getLogger(__name__)

fake = Faker()

_MISSING = object()
_WORD_RE = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")


def hint_words(field_name: str) -> set[str]:
    """
    Split a field name into lowercase words.

    Examples:
        >>> sorted(hint_words("firstName"))
        ['first', 'firstname', 'name']
        >>> sorted(hint_words("ip_address"))
        ['address', 'ip', 'ipaddress']
    """
    words = [w.lower() for w in _WORD_RE.findall(field_name)]
    return set(words) | {"".join(words)}


def match_hint(field_name: str, rules: list[tuple[tuple[str, ...], Any]]) -> Any:
    """Return the payload of the first rule whose words all occur in the name."""
    words = hint_words(field_name)
    for required, payload in rules:
        if all(word in words for word in required):
            return payload
    return None


def to_snake_case(name: str) -> str:
    """Convert ``firstName`` to ``first_name``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class BaseGenerator(ABC):
    """
    Base class for value generators.

    Subclass this to create custom generators that can be registered and
    referenced by name from a field's ``generator`` setting.

    Example:
        >>> class SKUGenerator(BaseGenerator):
        ...     def generate(self, field_name, config=None, **context):
        ...         instance = context.get('instance', 1)
        ...         return f"SKU-{instance:06d}"
        >>>
        >>> register_generator('sku', SKUGenerator)
    """

    def __init__(self, faker: Faker | None = None):
        self.fake = faker if faker is not None else fake

    @abstractmethod
    def generate(self, field_name: str, config: FieldConfig | None = None, **context: Any) -> Any:
        """
        Generate a value for a field.

        Args:
            field_name: Field name, used as a semantic hint
            config: Effective field configuration
            **context: Additional context:
                - instance: Record number within the model (1-based)
                - record: Values generated so far for the current record
                - model: SchemaModel being seeded

        Returns:
            Generated value, or None when no value can be produced
        """
        pass

    def pick(self, values: list[Any]) -> Any:
        """Pick one value uniformly at random."""
        return self.fake.random.choice(values)

    def generate_named(
        self, name: str, field_name: str, config: FieldConfig | None, **context: Any
    ) -> Any:
        """
        Run a generator referenced by name.

        Resolution order: registered custom generator, then a Faker provider
        path such as ``internet.email`` or ``person.firstName`` (the last
        segment, in snake_case, must be a Faker method).

        Returns:
            The generated value, or the module sentinel when the name is unknown
        """
        generator_class = get_generator(name)
        if generator_class is not None:
            return create_generator(generator_class, self.fake).generate(
                field_name, config, **context
            )

        method = getattr(self.fake, to_snake_case(name.split(".")[-1]), None)
        if callable(method):
            return method()
        return _MISSING

    def _configured(self, field_name: str, config: FieldConfig | None, context: dict) -> Any:
        """Apply the generator name and explicit values settings, if any."""
        if config is None:
            return _MISSING
        if config.generator:
            value = self.generate_named(config.generator, field_name, config, **context)
            if value is not _MISSING:
                return value
            logger.warning(
                f"Unknown generator '{config.generator}' for field '{field_name}'; "
                f"falling back to defaults"
            )
        if config.values:
            return self.pick(config.values)
        return _MISSING


def create_generator(generator_class: type, faker: Faker) -> Any:
    """Instantiate a generator class, sharing the Faker instance when supported."""
    if isinstance(generator_class, type) and issubclass(generator_class, BaseGenerator):
        return generator_class(faker)
    return generator_class()


def is_missing(value: Any) -> bool:
    """Check for the 'no configured value' sentinel."""
    return value is _MISSING
