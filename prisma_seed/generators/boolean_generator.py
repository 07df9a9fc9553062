"""Boolean generator."""

from typing import Any

from prisma_seed.config import FieldConfig
from prisma_seed.generators.base import BaseGenerator, is_missing


class BooleanGenerator(BaseGenerator):
    """Generate True or False; bias only through configured values."""

    def generate(self, field_name: str, config: FieldConfig | None = None, **context: Any) -> Any:
        value = self._configured(field_name, config, context)
        if not is_missing(value):
            return value
        return self.fake.pybool()
