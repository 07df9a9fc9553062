"""Schema parsing: model-definition text to SchemaModel descriptors."""

import logging
from pathlib import Path

from prisma_seed.exceptions import SchemaReadError
from prisma_seed.models import SchemaModel
from prisma_seed.schema.parser import SchemaParser, normalize_type, relation_cardinality

logger = logging.getLogger(__name__)

__all__ = [
    "SchemaParser",
    "load_schema",
    "normalize_type",
    "parse_schema",
    "read_schema_text",
    "relation_cardinality",
]


def parse_schema(text: str) -> list[SchemaModel]:
    """Parse schema text into models (see SchemaParser.parse)."""
    return SchemaParser().parse(text)


def read_schema_text(path: str | Path) -> str:
    """
    Read a schema file.

    Raises:
        SchemaReadError: If the file is missing, unreadable or not UTF-8
    """
    schema_path = Path(path)
    try:
        return schema_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaReadError(str(schema_path), str(e)) from e


def load_schema(path: str | Path) -> list[SchemaModel]:
    """
    Read and parse a schema file.

    Args:
        path: Path to a schema file (e.g. prisma/schema.prisma)

    Returns:
        Parsed models in source order

    Raises:
        SchemaReadError: If the file cannot be read (parse problems never raise)
    """
    text = read_schema_text(path)
    logger.debug(f"Loaded schema from {path} ({len(text)} characters)")
    return parse_schema(text)
