"""
prisma-seed - Schema-Driven Seed Data Generation

Reads a Prisma schema, orders its models by foreign-key dependencies and fills
a record sink (PostgreSQL or in-memory) with realistic fake data.
"""

from prisma_seed.backends import MemorySink, PostgresSink, RecordSink
from prisma_seed.config import FieldConfig, ModelConfig, RelationConfig, SeederConfig
from prisma_seed.dependency import resolve_seed_order
from prisma_seed.generators.base import BaseGenerator
from prisma_seed.generators.registry import (
    clear_generators,
    list_generators,
    register_generator,
    unregister_generator,
)
from prisma_seed.models import SchemaField, SchemaModel, SeedResult
from prisma_seed.schema import load_schema, parse_schema
from prisma_seed.seeder import Seeder

__version__ = "0.1.0"

__all__ = [
    "Seeder",
    "SeederConfig",
    "ModelConfig",
    "FieldConfig",
    "RelationConfig",
    "SchemaModel",
    "SchemaField",
    "SeedResult",
    "RecordSink",
    "MemorySink",
    "PostgresSink",
    "parse_schema",
    "load_schema",
    "resolve_seed_order",
    "BaseGenerator",
    "register_generator",
    "list_generators",
    "clear_generators",
    "unregister_generator",
]
