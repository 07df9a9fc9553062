"""Value generators for the different semantic field types."""

from faker import Faker

from prisma_seed.generators.base import BaseGenerator
from prisma_seed.generators.boolean_generator import BooleanGenerator
from prisma_seed.generators.date_generator import DateGenerator
from prisma_seed.generators.enum_generator import EnumGenerator
from prisma_seed.generators.number_generator import NumberGenerator
from prisma_seed.generators.registry import (
    clear_generators,
    list_generators,
    register_generator,
    unregister_generator,
)
from prisma_seed.generators.string_generator import StringGenerator

# Semantic type -> generator class
BUILTIN_GENERATORS: dict[str, type[BaseGenerator]] = {
    "string": StringGenerator,
    "number": NumberGenerator,
    "date": DateGenerator,
    "boolean": BooleanGenerator,
    "enum": EnumGenerator,
}


def build_generators(faker: Faker) -> dict[str, BaseGenerator]:
    """Instantiate every built-in generator around one shared Faker instance."""
    return {type_name: cls(faker) for type_name, cls in BUILTIN_GENERATORS.items()}


__all__ = [
    "BUILTIN_GENERATORS",
    "BaseGenerator",
    "BooleanGenerator",
    "DateGenerator",
    "EnumGenerator",
    "NumberGenerator",
    "StringGenerator",
    "build_generators",
    "clear_generators",
    "list_generators",
    "register_generator",
    "unregister_generator",
]
