"""
Query Module - Needle predicates and record ordering

A needle is the query string callers pass to select/update/delete:
- "*" matches every record
- "=value" matches values equal to value (case-insensitive)
- anything else is a case-insensitive regular expression searched
  anywhere in the value
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Tuple, Union
import re

from .errors import InvalidInput


Record = Dict[str, str]


class SortDirection(Enum):
    """Sort order for select()"""
    ASC = 1
    DESC = 2

    @classmethod
    def parse(cls, value: Union['SortDirection', str, int]) -> 'SortDirection':
        """Accept a SortDirection, 'asc'/'desc' or the integers 1/2"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InvalidInput(f'Invalid sort direction "{value}".') from None
        try:
            return cls(value)
        except ValueError:
            raise InvalidInput(f"Invalid sort direction {value!r}.") from None


# Only these characters are escaped in an exact needle; any other
# metacharacter in the value stays live.
_EXACT_ESCAPE_RE = re.compile(r'([.+^$?\[\]])')


class Predicate:
    """Base class for the needle variants"""

    def matches(self, value: str) -> bool:
        raise NotImplementedError

    @staticmethod
    def from_needle(needle: Any) -> 'Predicate':
        """Translate a needle string into its predicate variant"""
        needle = str(needle)
        if needle == '*':
            return MatchAll()
        if needle.startswith('='):
            return Exact(needle[1:])
        return Pattern(needle)


@dataclass(frozen=True)
class MatchAll(Predicate):
    """Matches every value"""

    def matches(self, value: str) -> bool:
        return True


@dataclass(frozen=True)
class Exact(Predicate):
    """Whole-value match, case-insensitive"""
    value: str

    def __post_init__(self):
        escaped = _EXACT_ESCAPE_RE.sub(r'\\\1', self.value)
        object.__setattr__(self, '_regex', _compile('^' + escaped + '$'))

    def matches(self, value: str) -> bool:
        return self._regex.search(value) is not None


@dataclass(frozen=True)
class Pattern(Predicate):
    """Live regular expression searched anywhere in the value, case-insensitive"""
    pattern: str

    def __post_init__(self):
        object.__setattr__(self, '_regex', _compile(self.pattern))

    def matches(self, value: str) -> bool:
        return self._regex.search(value) is not None


def _compile(pattern: str):
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise InvalidInput(f'Invalid needle pattern "{pattern}": {e}') from e


_NUMERIC_RE = re.compile(r'[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


def collation_key(value: str) -> Tuple[int, Any]:
    """
    Sort key used for every ordering in the engine.

    Empty values come first, then values that read as decimal numbers
    (compared exactly, as decimals), then
    everything else compared by code point.
    """
    if value == '':
        return (0, 0)
    if _NUMERIC_RE.fullmatch(value):
        return (1, Decimal(value))
    return (2, value)


def sort_records(records: List[Record], column: str,
                 direction: SortDirection = SortDirection.ASC) -> List[Record]:
    """Stable sort of records by the value of column"""
    return sorted(
        records,
        key=lambda row: collation_key(row.get(column, '')),
        reverse=direction == SortDirection.DESC,
    )
