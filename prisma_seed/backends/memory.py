"""Memory sink - in-memory record store for testing without a database."""

from typing import Any

from prisma_seed.backends.base import RecordSink
from prisma_seed.exceptions import SinkError


class MemorySink(RecordSink):
    """
    In-memory record sink for seeding without a database.

    Simulates database behavior:
    - Assigns sequential integer ids (starting from 1) when the id column is missing
    - Enforces UNIQUE columns (in-memory tracking)
    - Stores records in memory (not database)

    Use case: Fast unit tests, offline development, prototyping seed configs.
    """

    def __init__(
        self,
        id_field: str = "id",
        id_fields: dict[str, str] | None = None,
        unique_fields: dict[str, list[str]] | None = None,
    ):
        """
        Initialize memory sink with empty state.

        Args:
            id_field: Identifier column used for every model by default
            id_fields: Per-model identifier column overrides
            unique_fields: Model -> columns that must hold distinct values
        """
        self.id_field = id_field
        self.id_fields = id_fields or {}
        self.unique_fields = unique_fields or {}
        self._data: dict[str, list[dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}
        self._unique_values: dict[tuple[str, str], set[Any]] = {}

    def create(self, model: str, record: dict[str, Any]) -> Any:
        """
        Simulate database insert (assign id, check uniqueness, store in memory).

        Raises:
            SinkError: If a unique column value was already stored
        """
        stored = record.copy()
        id_field = self.id_fields.get(model, self.id_field)

        for column in self.unique_fields.get(model, []):
            value = stored.get(column)
            if value is not None and value in self._unique_values.get((model, column), set()):
                raise SinkError(model, f"duplicate value {value!r} for unique column '{column}'")

        if stored.get(id_field) is None:
            self._sequences[model] = self._sequences.get(model, 0) + 1
            stored[id_field] = self._sequences[model]

        for column in self.unique_fields.get(model, []):
            if stored.get(column) is not None:
                self._unique_values.setdefault((model, column), set()).add(stored[column])

        self._data.setdefault(model, []).append(stored)
        return stored[id_field]

    def delete_all(self, model: str) -> int:
        """Remove a model's records (sequences keep counting, like IDENTITY)."""
        removed = len(self._data.pop(model, []))
        for key in [k for k in self._unique_values if k[0] == model]:
            del self._unique_values[key]
        return removed

    def get_records(self, model: str) -> list[dict[str, Any]]:
        """
        Get in-memory records for inspection.

        Args:
            model: Model name

        Returns:
            List of record dicts for the model
        """
        return self._data.get(model, [])

    def clear(self) -> None:
        """Clear all in-memory data and sequences."""
        self._data.clear()
        self._sequences.clear()
        self._unique_values.clear()
