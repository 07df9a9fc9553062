"""Record sink interface."""

from abc import ABC, abstractmethod
from typing import Any


class RecordSink(ABC):
    """
    Persistence boundary the seeder writes records to.

    Implementations raise SinkError when a write is rejected; the seeder
    counts the failure and moves on to the next record.
    """

    @abstractmethod
    def create(self, model: str, record: dict[str, Any]) -> Any:
        """
        Persist one record.

        Args:
            model: Model name
            record: Field name -> value

        Returns:
            Identifier assigned to the record (None if the store has none)
        """

    @abstractmethod
    def delete_all(self, model: str) -> int:
        """
        Remove every record of a model.

        Returns:
            Number of records removed
        """
