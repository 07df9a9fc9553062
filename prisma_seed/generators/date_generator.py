"""Faker-based date/time generator."""

from datetime import datetime, time
from typing import Any

from prisma_seed.config import FieldConfig
from prisma_seed.generators.base import BaseGenerator, is_missing, match_hint

# Field name words -> (start, end) window understood by Faker
HINT_WINDOWS = [
    (("created",), ("-2y", "now")),
    (("updated",), ("-1y", "now")),
    (("deleted",), ("-1y", "now")),
    (("joined",), ("-5y", "now")),
    (("registered",), ("-5y", "now")),
    (("published",), ("-2y", "now")),
    (("last",), ("-30d", "now")),
    (("expires",), ("now", "+1y")),
    (("expiry",), ("now", "+1y")),
    (("due",), ("now", "+6M")),
    (("deadline",), ("now", "+6M")),
    (("scheduled",), ("now", "+3M")),
]

GENERIC_WINDOW = ("-5y", "+1y")


class DateGenerator(BaseGenerator):
    """
    Generate datetimes.

    Birth-like hints ("birthDate", "dob") always yield a moment in the past;
    other hints pick a past or future window; anything else falls within
    five years back to one year ahead.
    """

    def generate(self, field_name: str, config: FieldConfig | None = None, **context: Any) -> Any:
        value = self._configured(field_name, config, context)
        if not is_missing(value):
            return value

        if match_hint(field_name, [(("birth",), True), (("dob",), True), (("birthday",), True)]):
            birth_date = self.fake.date_of_birth(minimum_age=18, maximum_age=80)
            return datetime.combine(birth_date, time())

        start, end = match_hint(field_name, HINT_WINDOWS) or GENERIC_WINDOW
        return self.fake.date_time_between(start_date=start, end_date=end)
