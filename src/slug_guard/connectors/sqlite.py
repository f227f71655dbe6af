"""
SQLite Database Connector.

Provides row-level access to a SQLite database with:
- Lazy connection management with rollback on error
- Schema creation with unique columns
- Row insert/update/delete by primary key
- Simple equality lookups
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generator, Sequence


@dataclass
class ColumnInfo:
    """Information about a table column."""

    name: str
    type: str
    notnull: bool
    default_value: Any
    is_primary_key: bool


@dataclass
class TableInfo:
    """Information about a database table."""

    name: str
    columns: list[ColumnInfo] = field(default_factory=list)
    row_count: int = 0
    indexes: list[str] = field(default_factory=list)
    create_sql: str = ""


class SQLiteConnector:
    """
    Connector for SQLite databases.

    Example:
        with SQLiteConnector(Path("blog.db"), create=True) as db:
            db.ensure_table("posts", {"title": "TEXT", "slug": "TEXT"}, unique=["slug"])
            row_id = db.insert_row("posts", {"title": "Hello", "slug": "hello"})
            db.find_row("posts", "slug", "hello")
    """

    def __init__(
        self,
        path: Path | str,
        readonly: bool = False,
        create: bool = False,
    ) -> None:
        """
        Initialize SQLite connector.

        Args:
            path: Path to SQLite database file (":memory:" for in-memory)
            readonly: Open in read-only mode
            create: Create the database file if it does not exist
        """
        self.path = Path(path) if str(path) != ":memory:" else None
        self.readonly = readonly
        self.create = create
        self._connection: sqlite3.Connection | None = None

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        if self._connection is None:
            self._connection = self._create_connection()

        try:
            yield self._connection
        except Exception:
            self._connection.rollback()
            raise

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new database connection."""
        if self.path is None:
            conn = sqlite3.connect(":memory:")
        else:
            if not self.path.exists():
                if not self.create or self.readonly:
                    raise FileNotFoundError(f"Database not found: {self.path}")
                self.path.parent.mkdir(parents=True, exist_ok=True)

            uri = f"file:{self.path}"
            if self.readonly:
                uri += "?mode=ro"

            conn = sqlite3.connect(uri, uri=True, timeout=30.0)

        conn.row_factory = sqlite3.Row
        if self.path is not None and not self.readonly:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")

        return conn

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "SQLiteConnector":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def ensure_table(
        self,
        table: str,
        columns: dict[str, str],
        unique: Sequence[str] = (),
    ) -> bool:
        """
        Create a table with an integer primary key if it does not exist.

        Args:
            table: Table name
            columns: Column name -> SQL type (excluding "id")
            unique: Columns that get a UNIQUE index

        Returns:
            True if the table was created, False if it already existed
        """
        if self.get_table(table) is not None:
            return False

        col_defs = ", ".join(f'"{name}" {sql_type}' for name, sql_type in columns.items())
        self.execute_sql(
            f'CREATE TABLE "{table}" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, {col_defs})'
        )
        for column in unique:
            self.execute_sql(
                f'CREATE UNIQUE INDEX "index_{table}_on_{column}" ON "{table}" ("{column}")'
            )
        return True

    def get_table(self, name: str) -> TableInfo | None:
        """Get information about a specific table."""
        with self.connection() as conn:
            row = conn.execute(
                "SELECT name, sql FROM sqlite_master WHERE type = 'table' AND name = ?",
                (name,),
            ).fetchone()
            if row is None:
                return None

            columns = [
                ColumnInfo(
                    name=col["name"],
                    type=col["type"],
                    notnull=bool(col["notnull"]),
                    default_value=col["dflt_value"],
                    is_primary_key=bool(col["pk"]),
                )
                for col in conn.execute(f'PRAGMA table_info("{name}")')
            ]
            indexes = [idx["name"] for idx in conn.execute(f'PRAGMA index_list("{name}")')]

        return TableInfo(
            name=name,
            columns=columns,
            row_count=self.get_row_count(name),
            indexes=indexes,
            create_sql=row["sql"] or "",
        )

    def get_row_count(self, table: str) -> int:
        """Get the row count for a table."""
        with self.connection() as conn:
            cursor = conn.execute(f'SELECT COUNT(*) as count FROM "{table}"')
            row = cursor.fetchone()
            return row["count"] if row else 0

    def execute_sql(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """
        Execute a write statement and commit.

        Args:
            sql: SQL statement
            params: Query parameters

        Returns:
            The cursor (rowcount / lastrowid available)
        """
        if self.readonly:
            raise RuntimeError("Cannot execute write operations in read-only mode")

        with self.connection() as conn:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor

    def insert_row(self, table: str, values: dict[str, Any]) -> int:
        """Insert one row and return its id."""
        col_str = ", ".join(f'"{c}"' for c in values)
        placeholders = ", ".join("?" for _ in values)
        cursor = self.execute_sql(
            f'INSERT INTO "{table}" ({col_str}) VALUES ({placeholders})',
            tuple(values.values()),
        )
        return int(cursor.lastrowid)

    def update_row(self, table: str, row_id: int, values: dict[str, Any]) -> int:
        """Update columns of one row by id. Returns affected row count."""
        if not values:
            return 0
        assignments = ", ".join(f'"{c}" = ?' for c in values)
        cursor = self.execute_sql(
            f'UPDATE "{table}" SET {assignments} WHERE "id" = ?',
            (*values.values(), row_id),
        )
        return cursor.rowcount

    def delete_row(self, table: str, row_id: int) -> int:
        """Delete one row by id. Returns affected row count."""
        cursor = self.execute_sql(f'DELETE FROM "{table}" WHERE "id" = ?', (row_id,))
        return cursor.rowcount

    def find_row(self, table: str, column: str, value: Any) -> dict[str, Any] | None:
        """Fetch the first row where column equals value."""
        with self.connection() as conn:
            row = conn.execute(
                f'SELECT * FROM "{table}" WHERE "{column}" = ? LIMIT 1',
                (value,),
            ).fetchone()
            return dict(row) if row else None

    def fetch_all(self, table: str, order_by: str = "id") -> list[dict[str, Any]]:
        """Fetch every row of a table."""
        with self.connection() as conn:
            cursor = conn.execute(f'SELECT * FROM "{table}" ORDER BY "{order_by}"')
            return [dict(row) for row in cursor]

    def exists(
        self,
        table: str,
        column: str,
        value: Any,
        exclude_id: int | None = None,
    ) -> bool:
        """
        Check whether any row has column == value.

        Args:
            table: Table name
            column: Column to match
            value: Value to look for
            exclude_id: Row id to ignore (the record being saved)
        """
        query = f'SELECT 1 FROM "{table}" WHERE "{column}" = ?'
        params: list[Any] = [value]
        if exclude_id is not None:
            query += ' AND "id" != ?'
            params.append(exclude_id)

        with self.connection() as conn:
            return conn.execute(query + " LIMIT 1", params).fetchone() is not None
