"""
Table - Main entry point for FlatDB

A Table owns one delimited text file. The whole table is loaded into
memory on construction, queried in memory, and written back in full on
every mutation (create, insert, update, delete).
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..storage.engine import TableFile
from ..storage.format import DEFAULT_SEPARATOR
from .errors import AlreadyExists, InvalidInput, TableNotCreated, TypeMismatch, UnknownColumn
from .logging import get_logger
from .query import MatchAll, Predicate, Record, SortDirection, collation_key, sort_records
from .schema import TableSchema
from .types import ColumnType, TypeValidator


logger = get_logger(__name__)

ASC = SortDirection.ASC
DESC = SortDirection.DESC


class Table:
    """
    FlatDB table instance.

    Usage:
        table = Table("users.db")
        if not table.is_created():
            table.create({'id': 'int', 'name': 'str', 'joined': 'date'})
        table.set_index_key('id')
        table.insert({'name': 'Alice', 'joined': 'NOW()'})
        for row in table.select('name', 'ali'):
            print(row)
    """

    def __init__(self, path: Union[str, Path], separator: str = DEFAULT_SEPARATOR):
        """
        Open (and if needed create) the table file.

        Args:
            path: Table file location
            separator: Single-character field delimiter

        Raises:
            NotWritable: If the file cannot be created or written
        """
        self.file = TableFile(path, separator)
        self.path = self.file.path
        self.schema = TableSchema()
        self.records: List[Record] = []
        self._index_key: Optional[str] = None
        self._affected_rows = 0
        self._log = logger.bind(path=self.path)

        self._read()

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def is_created(self) -> bool:
        """Reload the file; True if it holds a table."""
        return self._read()

    def create(self, columns: Any) -> bool:
        """
        Create the table and write its header.

        Args:
            columns: Mapping of name -> type, or a sequence of Column /
                (name, type) pairs; types are 'int', 'str' or 'date'

        Raises:
            AlreadyExists: If the file already holds a table
            InvalidSchema: If the column definition is invalid
        """
        if self._read():
            raise AlreadyExists(self.path)

        self.schema = TableSchema.from_definition(columns, self.file.codec.separator)
        self.records = []

        self._log.info("table_created", columns=self.schema.get_column_names())
        return self.commit()

    def set_index_key(self, name: str) -> None:
        """
        Use an int column for auto-increment and storage ordering.

        Raises:
            UnknownColumn: If name is not a column
            TypeMismatch: If the column is not of type int
        """
        column = self.schema.get_column(name)
        if column is None:
            raise UnknownColumn(name)
        if column.col_type != ColumnType.INTEGER:
            raise TypeMismatch(f'"{name}" column is not a type of integer.')

        self._index_key = name
        self._log.info("index_key_set", column=name)

    @property
    def index_key(self) -> Optional[str]:
        return self._index_key

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def insert(self, fields: Mapping[str, Any]) -> bool:
        """
        Insert a record and commit.

        Columns missing from fields are stored as empty strings. With an
        index key set, a missing key is assigned max + 1; a supplied key
        that already exists turns the insert into a no-op (the table is
        still committed).

        Raises:
            InvalidInput: If fields is not a non-empty mapping, or a value
                ends with a backslash
            TableNotCreated: If create() has not been called
        """
        self._require_created()
        if not isinstance(fields, Mapping):
            raise InvalidInput("Fields is not a mapping.")
        if not fields:
            raise InvalidInput("Fields is empty.")

        record = self.schema.empty_record()
        record.update(self._coerce_fields(fields))

        key = self._index_key
        if key is not None:
            if fields.get(key) is None:
                record[key] = str(self._next_index_value())
            elif self._index_exists(record[key]):
                self._log.debug("insert_skipped_duplicate_key", column=key, value=record[key])
                return self.commit()

        self.records.append(record)
        return self.commit()

    def _coerce_fields(self, fields: Mapping[str, Any]) -> Dict[str, str]:
        """Coerced values for the schema columns present in fields"""
        coerced = {}
        for col in self.schema:
            value = fields.get(col.name)
            if value is None:
                continue
            value = TypeValidator.coerce(col.col_type, value)
            # a trailing backslash would escape the closing quote on disk
            if value.endswith('\\'):
                raise InvalidInput(f'Value for "{col.name}" must not end with a backslash.')
            coerced[col.name] = value
        return coerced

    def _next_index_value(self) -> int:
        values = [TypeValidator.to_int(row[self._index_key]) for row in self.records]
        return max(values) + 1 if values else 1

    def _index_exists(self, value: str) -> bool:
        wanted = TypeValidator.to_int(value)
        return any(TypeValidator.to_int(row[self._index_key]) == wanted for row in self.records)

    def select(self, column: str = '*', needle: Any = '*', order_by: str = '',
               direction: Union[SortDirection, str, int] = ASC) -> List[Record]:
        """
        Fetch records matching a needle.

        Args:
            column: Column to test, or '*' to test all values concatenated
            needle: '*' for everything, '=value' for an exact match, or a
                case-insensitive pattern matched anywhere in the value
            order_by: Column to sort by first (the sort is kept in memory)
            direction: ASC or DESC

        Returns:
            Copies of the matching records
        """
        direction = SortDirection.parse(direction)
        predicate = Predicate.from_needle(needle)

        if order_by and order_by in self.schema:
            self.records = sort_records(self.records, order_by, direction)

        if isinstance(predicate, MatchAll):
            self._affected_rows = len(self.records)
            return [dict(row) for row in self.records]

        names = self.schema.get_column_names()
        result = []
        for row in self.records:
            if column == '*':
                value = ''.join(row[name] for name in names)
            elif column in row:
                value = row[column]
            else:
                continue
            if predicate.matches(value):
                result.append(dict(row))

        self._affected_rows = len(result)
        return result

    def update(self, column: str, needle: Any, fields: Mapping[str, Any]) -> bool:
        """
        Overwrite the given fields of every record matching the needle.

        Columns absent from fields are left untouched.

        Raises:
            InvalidInput: If fields is not a mapping, or a value ends with
                a backslash
            TableNotCreated: If create() has not been called
        """
        self._affected_rows = 0
        self._require_created()

        if not isinstance(fields, Mapping):
            raise InvalidInput("Fields is not a mapping.")

        predicate = Predicate.from_needle(needle)
        changes = self._coerce_fields(fields)

        total = len(self.records)
        for i in range(total):
            row = self.records[i]
            if column in row and predicate.matches(row[column]):
                self._affected_rows += 1
                row.update(changes)

        return self.commit()

    def delete(self, column: str, needle: Any) -> bool:
        """Remove every record matching the needle."""
        self._require_created()
        predicate = Predicate.from_needle(needle)

        kept = [
            row for row in self.records
            if column not in row or not predicate.matches(row[column])
        ]

        self._affected_rows = len(self.records) - len(kept)
        self.records = kept

        return self.commit()

    def affected_rows(self) -> int:
        """Rows matched by the last select, update or delete."""
        return self._affected_rows

    def get_last_id(self) -> int:
        """Index value of the last stored record, 0 if empty or unindexed."""
        if not self.records or self._index_key is None:
            return 0
        return TypeValidator.to_int(self.records[-1][self._index_key])

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def columns(self) -> List[str]:
        return self.schema.get_column_names()

    def describe(self) -> Dict[str, Any]:
        """Schema and index key as a dictionary"""
        info = self.schema.to_dict()
        info['index_key'] = self._index_key
        return info

    def count(self) -> int:
        return len(self.records)

    def reload(self) -> bool:
        """Discard in-memory state and read the file again."""
        return self._read()

    # ------------------------------------------------------------------
    # Load / commit
    # ------------------------------------------------------------------

    def _require_created(self) -> None:
        if not len(self.schema):
            raise TableNotCreated(self.path)

    def _read(self) -> bool:
        loaded = self.file.read()
        if loaded is None:
            self.schema = TableSchema()
            self.records = []
            return False

        self.schema, self.records = loaded
        if self._index_key is not None and self._index_key not in self.schema:
            self._index_key = None
        return True

    def commit(self) -> bool:
        """Sort by the index key (if set) and rewrite the file."""
        if self._index_key is not None:
            key = self._index_key
            self.records.sort(key=lambda row: collation_key(row[key]))

        return self.file.write(self.schema, self.records)

    def close(self) -> None:
        """Close the table (nothing is held open between operations)."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"Table({self.path!r}, rows={len(self.records)})"
