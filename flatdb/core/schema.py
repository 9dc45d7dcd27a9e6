"""
Schema Module - Defines table structure

A schema is an ordered list of typed columns. The order defines the
field order on disk, and the schema is persisted as the file header.
Column types are fixed once the table is created.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import InvalidSchema
from .types import ColumnType, TypeValidator


# Characters a column name may not contain: they would break the
# 'name[type]' header token or the line structure.
RESERVED_NAME_CHARS = '[]"\r\n'


@dataclass(frozen=True)
class Column:
    """Represents a column in a table"""
    name: str
    col_type: ColumnType

    def __str__(self) -> str:
        return f"{self.name}[{self.col_type}]"


@dataclass
class TableSchema:
    """Represents the schema of a table"""
    columns: List[Column] = field(default_factory=list)

    def __post_init__(self):
        self._column_map: Dict[str, Column] = {}
        for col in self.columns:
            if col.name in self._column_map:
                raise InvalidSchema(f'Duplicate column "{col.name}".')
            self._column_map[col.name] = col

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self):
        return iter(self.columns)

    def __contains__(self, name: str) -> bool:
        return name in self._column_map

    def get_column(self, name: str) -> Optional[Column]:
        """Get column by name"""
        return self._column_map.get(name)

    def get_column_names(self) -> List[str]:
        """Get list of column names"""
        return [col.name for col in self.columns]

    def empty_record(self) -> Dict[str, str]:
        """A record holding an empty string for every column"""
        return {col.name: '' for col in self.columns}

    def to_dict(self) -> dict:
        """Serialize schema to dictionary"""
        return {
            'columns': [
                {'name': col.name, 'type': str(col.col_type)}
                for col in self.columns
            ],
        }

    @classmethod
    def from_definition(cls, definition: Any, separator: str = ';') -> 'TableSchema':
        """
        Build a schema from a caller's column definition.

        Args:
            definition: Mapping of name -> type, or a sequence of Column
                objects or (name, type) pairs. Types are ColumnType members
                or their tokens ('int', 'str', 'date').
            separator: Field delimiter of the target file; column names
                may not contain it.

        Raises:
            InvalidSchema: If the definition is empty, malformed, uses an
                unknown type or an unencodable name.
        """
        if isinstance(definition, Mapping):
            pairs: Iterable = definition.items()
        elif isinstance(definition, (list, tuple)):
            pairs = definition
        else:
            raise InvalidSchema("Columns must be a mapping or a sequence of columns.")

        columns = []
        for item in pairs:
            if isinstance(item, Column):
                name, col_type = item.name, item.col_type
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                name, col_type = item
            else:
                raise InvalidSchema(f"Invalid column definition {item!r}.")

            cls._check_name(name, separator)
            columns.append(Column(name, TypeValidator.parse_type(col_type)))

        if not columns:
            raise InvalidSchema("Columns are empty.")

        return cls(columns)

    @staticmethod
    def _check_name(name: Any, separator: str) -> None:
        if not isinstance(name, str) or not name:
            raise InvalidSchema(f"Invalid column name {name!r}.")
        for char in RESERVED_NAME_CHARS + separator:
            if char in name:
                raise InvalidSchema(f'Column name "{name}" may not contain {char!r}.')
