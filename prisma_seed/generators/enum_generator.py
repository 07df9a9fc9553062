"""Enum generator."""

from typing import Any

from prisma_seed.config import FieldConfig
from prisma_seed.generators.base import BaseGenerator, is_missing


class EnumGenerator(BaseGenerator):
    """
    Pick one of the configured values uniformly at random.

    Without values the enum is unresolvable and None is returned; callers
    omit the field rather than treating this as an error.
    """

    def generate(self, field_name: str, config: FieldConfig | None = None, **context: Any) -> Any:
        value = self._configured(field_name, config, context)
        if not is_missing(value):
            return value
        return None
