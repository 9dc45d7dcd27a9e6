"""
FlatDB - A flat-file record store

One schema-typed table per delimited text file, loaded into memory,
queried with substring or exact-match needles and rewritten on every
change.
"""

__version__ = "1.0.0"

from .core.table import Table, ASC, DESC
from .core.repl import REPL

__all__ = ["Table", "REPL", "ASC", "DESC"]
