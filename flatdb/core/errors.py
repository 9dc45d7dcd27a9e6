"""
Errors - Exceptions raised by the FlatDB table engine

Every error derives from FlatDBError, which is a ValueError so that
callers catching ValueError (like the shell) handle them uniformly.
"""


class FlatDBError(ValueError):
    """Base class for all table engine errors"""


class NotWritable(FlatDBError):
    """The table file cannot be written"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'"{path}" is not writable.')


class AlreadyExists(FlatDBError):
    """create() called on a file that already holds a table"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'Table already created in "{path}".')


class InvalidSchema(FlatDBError):
    """Column list is empty, malformed or uses an unknown type"""


class UnknownColumn(FlatDBError):
    """Column name is not part of the schema"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'"{name}" column not found.')


class TypeMismatch(FlatDBError):
    """Column exists but has the wrong type for the operation"""


class InvalidInput(FlatDBError):
    """Fields argument or needle of a query is malformed"""


class MalformedRecord(FlatDBError):
    """A stored row does not have one field per header column"""

    def __init__(self, line: int, expected: int, found: int):
        self.line = line
        self.expected = expected
        self.found = found
        super().__init__(
            f"Row at line {line} has {found} field(s), header declares {expected}"
        )


class TableNotCreated(FlatDBError):
    """Mutation attempted before create()"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'No table created in "{path}" yet.')
