"""
Record Format - Encodes and decodes the delimited table file

Layout:
    id[int];name[str];created[date]
    "1";"Alice";"2024-01-01 10:00:00"
    "2";"Bob \\"the builder\\"";""

- Line 1 is the header: 'name[type]' tokens joined by the separator.
- Every following line is one record: each value is wrapped in double
  quotes and the quoted values are joined by the separator.
- A double quote inside a value is written as \\". Values are otherwise
  written verbatim, so a value holding a newline spans several lines.
"""

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..core.errors import InvalidSchema, MalformedRecord
from ..core.schema import Column, TableSchema
from ..core.types import TypeValidator


DEFAULT_SEPARATOR = ';'

QUOTE = '"'
ESCAPED_QUOTE = '\\"'

_FORBIDDEN_SEPARATORS = ('"', '\\', '[', ']', '\r', '\n')


def escape(value: str) -> str:
    return value.replace(QUOTE, ESCAPED_QUOTE)


def unescape(value: str) -> str:
    return value.replace(ESCAPED_QUOTE, QUOTE)


class RecordCodec:
    """Converts between a schema plus records and the file text"""

    def __init__(self, separator: str = DEFAULT_SEPARATOR):
        if not isinstance(separator, str) or len(separator) != 1:
            raise ValueError(f"Separator must be a single character, got {separator!r}")
        if separator in _FORBIDDEN_SEPARATORS:
            raise ValueError(f"Separator {separator!r} is reserved by the file format")
        self.separator = separator

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def encode_header(self, schema: TableSchema) -> str:
        return self.separator.join(str(col) for col in schema) + '\n'

    def encode_record(self, schema: TableSchema, record: Dict[str, str]) -> str:
        fields = (QUOTE + escape(record.get(col.name, '')) + QUOTE for col in schema)
        return self.separator.join(fields) + '\n'

    def encode(self, schema: TableSchema, records: Sequence[Dict[str, str]]) -> str:
        """Render the full file contents"""
        parts = [self.encode_header(schema)]
        parts.extend(self.encode_record(schema, record) for record in records)
        return ''.join(parts)

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def decode(self, text: str) -> Optional[Tuple[TableSchema, List[Dict[str, str]]]]:
        """
        Parse file contents.

        Returns:
            (schema, records), or None when the text is empty or its
            header cannot be parsed.

        Raises:
            MalformedRecord: If a row's field count differs from the header.
        """
        rows = self.split_rows(text)

        first = next(rows, None)
        if first is None:
            return None

        schema = self.decode_header(first[1])
        if schema is None:
            return None

        names = schema.get_column_names()
        records = []
        for line, fields in rows:
            if len(fields) != len(names):
                raise MalformedRecord(line, len(names), len(fields))
            records.append({name: unescape(value) for name, value in zip(names, fields)})

        return schema, records

    def decode_header(self, tokens: List[str]) -> Optional[TableSchema]:
        """Parse 'name[type]' tokens, or None if any token is malformed"""
        columns = []
        for token in tokens:
            bracket = token.find('[')
            if bracket <= 0 or not token.endswith(']'):
                return None
            try:
                col_type = TypeValidator.parse_type(token[bracket + 1:-1])
            except InvalidSchema:
                return None
            columns.append(Column(token[:bracket], col_type))

        try:
            return TableSchema(columns)
        except InvalidSchema:
            return None

    def split_rows(self, text: str) -> Iterator[Tuple[int, List[str]]]:
        """
        Yield (line_number, raw_fields) for every row of text.

        Quoted fields may contain the separator and newlines. Inside quotes
        \\" does not end the field (and is kept as-is for unescape()) and
        "" stands for a single quote. Blank lines are skipped.
        """
        pos = 0
        end = len(text)
        line = 1

        while pos < end:
            if text[pos] == '\n':
                pos += 1
                line += 1
                continue
            if text.startswith('\r\n', pos):
                pos += 2
                line += 1
                continue

            row_line = line
            fields = []
            while True:
                value, pos, newlines = self._read_field(text, pos)
                line += newlines
                fields.append(value)
                if pos < end and text[pos] == self.separator:
                    pos += 1
                    continue
                break

            if pos < end:
                # consume the newline ending the row
                pos += 1
                line += 1

            yield row_line, fields

    def _read_field(self, text: str, pos: int) -> Tuple[str, int, int]:
        chars = []
        end = len(text)
        newlines = 0

        if pos < end and text[pos] == QUOTE:
            pos += 1
            while pos < end:
                char = text[pos]
                if char == '\\' and text.startswith(QUOTE, pos + 1):
                    chars.append(ESCAPED_QUOTE)
                    pos += 2
                    continue
                if char == QUOTE:
                    if text.startswith(QUOTE, pos + 1):
                        chars.append(QUOTE)
                        pos += 2
                        continue
                    pos += 1
                    break
                if char == '\n':
                    newlines += 1
                chars.append(char)
                pos += 1

        # Unquoted field, or stray text after a closing quote
        while pos < end:
            char = text[pos]
            if char == self.separator or char == '\n':
                break
            if char == '\r' and text.startswith('\n', pos + 1):
                pos += 1
                break
            chars.append(char)
            pos += 1

        return ''.join(chars), pos, newlines
