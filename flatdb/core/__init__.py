"""Core module - Table, Schema, Types, Query, Shell"""

from .table import Table, ASC, DESC
from .repl import REPL
from .schema import TableSchema, Column
from .types import ColumnType, TypeValidator
from .query import Predicate, MatchAll, Exact, Pattern, SortDirection
from .errors import (
    FlatDBError, NotWritable, AlreadyExists, InvalidSchema, UnknownColumn,
    TypeMismatch, InvalidInput, MalformedRecord, TableNotCreated,
)

__all__ = [
    'Table', 'ASC', 'DESC', 'REPL',
    'TableSchema', 'Column',
    'ColumnType', 'TypeValidator',
    'Predicate', 'MatchAll', 'Exact', 'Pattern', 'SortDirection',
    'FlatDBError', 'NotWritable', 'AlreadyExists', 'InvalidSchema',
    'UnknownColumn', 'TypeMismatch', 'InvalidInput', 'MalformedRecord',
    'TableNotCreated',
]
