"""
Storage Engine - Handles persistence of a table to its file

Features:
- One table per delimited text file
- Whole-file read on load, whole-file rewrite on commit
- Exclusive lock held for the duration of every write
- Reads take no lock
- Bytes that are not valid UTF-8 are carried through unchanged
"""

import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..core.errors import MalformedRecord, NotWritable
from ..core.logging import get_logger
from ..core.schema import TableSchema
from .format import DEFAULT_SEPARATOR, RecordCodec
from .locking import acquire_lock, release_lock


logger = get_logger(__name__)


class TableFile:
    """
    The file backing one table.

    Creates the file if it is missing; raises NotWritable if that fails
    or the file cannot be written.
    """

    def __init__(self, path: Union[str, Path], separator: str = DEFAULT_SEPARATOR):
        self.path = str(path)
        self.codec = RecordCodec(separator)

        if not os.path.exists(self.path):
            try:
                Path(self.path).touch()
            except OSError as e:
                logger.error("table_file_create_failed", path=self.path, error=str(e))
                raise NotWritable(self.path) from e

        self._check_writable()

    def _check_writable(self) -> None:
        if not os.access(self.path, os.W_OK):
            logger.error("table_file_not_writable", path=self.path)
            raise NotWritable(self.path)

    def read(self) -> Optional[Tuple[TableSchema, List[Dict[str, str]]]]:
        """
        Load the table from disk.

        Returns:
            (schema, records), or None if the file is missing, empty or
            has no parseable header.
        """
        try:
            with open(self.path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
                text = f.read()
        except FileNotFoundError:
            logger.debug("table_file_missing", path=self.path)
            return None

        try:
            loaded = self.codec.decode(text)
        except MalformedRecord as e:
            logger.error("table_file_malformed", path=self.path, line=e.line,
                         expected=e.expected, found=e.found)
            raise

        if loaded is None:
            if text.strip():
                logger.warning("table_header_unparseable", path=self.path)
            return None

        schema, records = loaded
        logger.debug("table_loaded", path=self.path, columns=len(schema), rows=len(records))
        return schema, records

    def write(self, schema: TableSchema, records: Sequence[Dict[str, str]]) -> bool:
        """Rewrite the whole file under an exclusive lock"""
        text = self.codec.encode(schema, records)

        self._check_writable()

        try:
            fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
            with os.fdopen(fd, 'r+', encoding='utf-8', errors='surrogateescape', newline='') as f:
                acquire_lock(f)
                try:
                    f.seek(0)
                    f.truncate()
                    f.write(text)
                    f.flush()
                finally:
                    release_lock(f)
        except PermissionError as e:
            logger.error("table_write_failed", path=self.path, error=str(e))
            raise NotWritable(self.path) from e

        logger.debug("table_committed", path=self.path, rows=len(records), size=len(text))
        return True
