"""
Data Types Module - Defines supported column data types for FlatDB

Supports: int, str, date

Every value is stored as text. Coercion turns raw caller input into the
text form of its column type and never fails: values that do not fit
degrade to a sentinel ("0" for int, "" for date).
"""

from enum import Enum
from datetime import datetime
from typing import Any, Union
import re

from .errors import InvalidSchema


class ColumnType(Enum):
    """Supported data types, valued by their on-disk token"""
    INTEGER = 'int'
    STRING = 'str'
    DATE = 'date'

    def __str__(self) -> str:
        return self.value


DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_INTEGER_RE = re.compile(r'[0-9]+')
_DATE_RE = re.compile(r'\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}')


class TypeValidator:
    """Parses type tokens and coerces values to their stored text form"""

    @staticmethod
    def parse_type(type_token: Union[str, ColumnType]) -> ColumnType:
        """Parse an on-disk type token ('int', 'str', 'date') into a ColumnType"""
        if isinstance(type_token, ColumnType):
            return type_token
        if not isinstance(type_token, str):
            raise InvalidSchema(f"Invalid data type {type_token!r}.")

        try:
            return ColumnType(type_token)
        except ValueError:
            raise InvalidSchema(f'Invalid data type "{type_token}".') from None

    @staticmethod
    def coerce(col_type: ColumnType, value: Any) -> str:
        """
        Convert a raw value to the text stored for a column of col_type.

        Args:
            col_type: Type of the target column
            value: Raw value supplied by the caller

        Returns:
            The stored text. Integers that are not plain digit strings
            become "0"; dates that are neither NOW() nor
            'YYYY-MM-DD HH:MM:SS' become "".
        """
        text = str(value)

        if col_type == ColumnType.INTEGER:
            if not _INTEGER_RE.fullmatch(text):
                return '0'

        elif col_type == ColumnType.DATE:
            if text.upper() == 'NOW()':
                return datetime.now().strftime(DATE_FORMAT)
            if not _DATE_RE.fullmatch(text):
                return ''

        return text

    @staticmethod
    def to_int(text: str) -> int:
        """Read a stored integer, treating anything non-numeric as 0"""
        if _INTEGER_RE.fullmatch(text):
            return int(text)
        return 0
