"""PostgreSQL sink - executes INSERT statements directly."""

import logging
from typing import Any

import psycopg
from psycopg import Connection, sql

from prisma_seed.backends.base import RecordSink
from prisma_seed.exceptions import SinkError

logger = logging.getLogger(__name__)


class PostgresSink(RecordSink):
    """
    Write records with INSERT statements.

    Uses PostgreSQL's RETURNING clause to capture the identifier assigned by
    the database (IDENTITY/serial columns, defaults). Each call commits on
    success and rolls back on failure, so one rejected record never poisons
    the connection for the next.
    """

    def __init__(
        self,
        conn: Connection,
        schema: str = "public",
        id_column: str = "id",
        id_columns: dict[str, str] | None = None,
    ):
        """
        Initialize sink.

        Args:
            conn: PostgreSQL connection
            schema: Schema name for qualified table names
            id_column: Identifier column returned for every model by default
            id_columns: Per-model identifier column overrides
        """
        self.conn = conn
        self.schema = schema
        self.id_column = id_column
        self.id_columns = id_columns or {}

    @classmethod
    def connect(cls, url: str, schema: str = "public", **kwargs: Any) -> "PostgresSink":
        """Open a connection and wrap it in a sink."""
        return cls(psycopg.connect(url, autocommit=False), schema=schema, **kwargs)

    def close(self) -> None:
        """Close the underlying connection."""
        self.conn.close()

    def _table(self, model: str) -> sql.Identifier:
        return sql.Identifier(self.schema, model)

    def create(self, model: str, record: dict[str, Any]) -> Any:
        """
        Insert one record and return its identifier.

        Raises:
            SinkError: If PostgreSQL rejects the row
        """
        columns = list(record)
        id_column = sql.Identifier(self.id_columns.get(model, self.id_column))

        if columns:
            query = sql.SQL(
                "INSERT INTO {table} ({columns}) VALUES ({values}) RETURNING {pk}"
            ).format(
                table=self._table(model),
                columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
                values=sql.SQL(", ").join([sql.Placeholder()] * len(columns)),
                pk=id_column,
            )
        else:
            query = sql.SQL("INSERT INTO {table} DEFAULT VALUES RETURNING {pk}").format(
                table=self._table(model), pk=id_column
            )

        try:
            with self.conn.cursor() as cur:
                cur.execute(query, [record[c] for c in columns])
                row = cur.fetchone()
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            raise SinkError(model, str(e).strip()) from e

        return row[0] if row else None

    def delete_all(self, model: str) -> int:
        """
        Delete every row of a model's table.

        Raises:
            SinkError: If PostgreSQL rejects the delete (e.g. FK from a child)
        """
        query = sql.SQL("DELETE FROM {table}").format(table=self._table(model))
        try:
            with self.conn.cursor() as cur:
                cur.execute(query)
                removed = cur.rowcount
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            raise SinkError(model, str(e).strip()) from e

        logger.debug(f"Deleted {removed} rows from {self.schema}.{model}")
        return removed
