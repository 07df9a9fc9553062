"""Record sink implementations for seed data execution."""

from prisma_seed.backends.base import RecordSink
from prisma_seed.backends.memory import MemorySink
from prisma_seed.backends.postgres import PostgresSink

__all__ = ["MemorySink", "PostgresSink", "RecordSink"]
