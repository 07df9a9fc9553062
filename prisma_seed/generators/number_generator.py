"""Faker-based number generator."""

import math
from datetime import date
from typing import Any

from prisma_seed.config import FieldConfig
from prisma_seed.exceptions import ConfigError
from prisma_seed.generators.base import BaseGenerator, is_missing, match_hint

# Field name words -> (low, high, integer)
HINT_RANGES = [
    (("age",), (18, 100, True)),
    (("year",), (1950, date.today().year, True)),
    (("price",), (1, 1000, False)),
    (("cost",), (1, 1000, False)),
    (("amount",), (1, 10000, False)),
    (("total",), (1, 10000, False)),
    (("salary",), (20000, 200000, True)),
    (("balance",), (0, 100000, False)),
    (("rating",), (1, 5, True)),
    (("stars",), (1, 5, True)),
    (("quantity",), (1, 100, True)),
    (("qty",), (1, 100, True)),
    (("stock",), (0, 500, True)),
    (("count",), (0, 100, True)),
    (("percent",), (0, 100, False)),
    (("percentage",), (0, 100, False)),
    (("latitude",), (-90, 90, False)),
    (("lat",), (-90, 90, False)),
    (("longitude",), (-180, 180, False)),
    (("lng",), (-180, 180, False)),
]

GENERIC_RANGE = (1, 1000, True)


class NumberGenerator(BaseGenerator):
    """
    Generate numbers within configured or hint-inferred bounds.

    With both ``min`` and ``max`` configured the result always satisfies
    ``min <= value <= max``. Integers are produced when the field is an
    integer field or both bounds are whole numbers; otherwise floats rounded
    to two decimals.
    """

    def generate(self, field_name: str, config: FieldConfig | None = None, **context: Any) -> Any:
        value = self._configured(field_name, config, context)
        if not is_missing(value):
            return value

        low, high, integer = match_hint(field_name, HINT_RANGES) or GENERIC_RANGE
        configured_min = config.min if config is not None else None
        configured_max = config.max if config is not None else None

        if configured_min is not None and configured_max is not None:
            if configured_min > configured_max:
                raise ConfigError(
                    f"min ({configured_min:g}) is greater than max ({configured_max:g})",
                    field=field_name,
                )
            low, high = configured_min, configured_max
            integer = float(low).is_integer() and float(high).is_integer()
        elif configured_min is not None:
            span = high - low
            low = configured_min
            high = high if high >= low else low + span
        elif configured_max is not None:
            span = high - low
            high = configured_max
            low = low if low <= high else high - span

        if config is not None and config.integer:
            integer = True

        if integer:
            int_low, int_high = math.ceil(low), math.floor(high)
            if int_low > int_high:
                raise ConfigError(
                    f"no integer between {low:g} and {high:g}", field=field_name
                )
            return self.fake.random_int(min=int_low, max=int_high)

        result = round(self.fake.random.uniform(low, high), 2)
        return min(max(result, low), high)
