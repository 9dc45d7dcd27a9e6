"""
REPL - Interactive shell for a FlatDB table

Provides a command-line interface for creating, querying and changing
the records of one table file.
"""

import os
import shlex
import sys
from typing import Dict, List, Optional

from .errors import InvalidInput
from .logging import setup_logging
from .table import Table


class REPL:
    """
    Interactive shell (Read-Eval-Print Loop) for one FlatDB table.

    Features:
    - Table commands (create, index, insert, select, update, delete)
    - Special dot commands (.schema, .count, .quit, etc.)
    - Pretty-printed results
    """

    BANNER = """
FlatDB - a flat-file record store
Table file: {path}

Type .help for commands.
"""

    HELP = """
Special Commands:
  .help             Show this help message
  .schema           Show the table's columns and index key
  .count            Show the number of records
  .lastid           Show the index value of the last record
  .reload           Re-read the table file
  .clear            Clear the screen
  .quit / .exit     Exit the shell

Table Commands:
  create name:type [name:type ...]                 Create the table (int, str, date)
  index <column>                                   Set the auto-increment index key
  insert col=value [col=value ...]                 Insert a record
  select [column] [needle] [order_by] [asc|desc]   Query records
  update <column> <needle> col=value [...]         Change matching records
  delete <column> <needle>                         Remove matching records

Needles:
  *          every record
  =value     exact match
  text       case-insensitive pattern anywhere in the value

Example:
  create id:int name:str joined:date
  index id
  insert name=Alice joined=NOW()
  select name ali
  update id =1 "name=Alice Smith"
"""

    def __init__(self, path: str, separator: str = ';'):
        """Initialize the shell on a table file."""
        self.table = Table(path, separator)
        self.running = False

    def run(self) -> None:
        """Start the REPL loop."""
        self.running = True
        print(self.BANNER.format(path=self.table.path))

        while self.running:
            try:
                self._process_input()
            except KeyboardInterrupt:
                print("\n(Use .quit to exit)")
            except EOFError:
                print()
                self._quit()

    def _process_input(self) -> None:
        """Read and process user input."""
        line = input("flatdb> ").strip()

        if not line:
            return

        if line.startswith('.'):
            self._handle_command(line)
            return

        self.execute(line)

    def _handle_command(self, cmd: str) -> None:
        """Handle special dot commands."""
        command = cmd.split(None, 1)[0].lower()

        if command in ('.quit', '.exit', '.q'):
            self._quit()
        elif command == '.help':
            print(self.HELP)
        elif command == '.schema':
            self._show_schema()
        elif command == '.count':
            print(f"{self.table.count()} rows")
        elif command == '.lastid':
            print(self.table.get_last_id())
        elif command == '.reload':
            created = self.table.reload()
            print("Reloaded." if created else "Table not created yet.")
        elif command == '.clear':
            os.system('clear' if os.name == 'posix' else 'cls')
        else:
            print(f"Unknown command: {command}")
            print("Type .help for available commands.")

    def _quit(self) -> None:
        """Exit the REPL."""
        print("Goodbye!")
        self.running = False
        self.table.close()

    def _show_schema(self) -> None:
        """Show the table's columns."""
        if not self.table.is_created():
            print("Table not created yet.")
            return

        info = self.table.describe()
        print(f"\nTable: {self.table.path}")
        print("-" * 60)
        for col in info['columns']:
            flag = 'INDEX KEY' if col['name'] == info['index_key'] else ''
            print(f"  {col['name']:20} {col['type']:15} {flag}")
        print()

    def execute(self, line: str) -> bool:
        """
        Run one table command and print its outcome.

        Returns:
            True on success, False if the command failed
        """
        try:
            self._dispatch(shlex.split(line))
        except ValueError as e:
            print(f"Error: {e}")
            return False
        return True

    def _dispatch(self, words: List[str]) -> None:
        if not words:
            return

        verb, args = words[0].lower(), words[1:]

        if verb == 'create':
            self.table.create(_parse_columns(args))
            print(f"Table created with {len(args)} column(s).")

        elif verb == 'index':
            if len(args) != 1:
                raise InvalidInput("Usage: index <column>")
            self.table.set_index_key(args[0])
            print(f"Index key set to {args[0]}.")

        elif verb == 'insert':
            self.table.insert(_parse_assignments(args))
            print(f"Inserted. Last id: {self.table.get_last_id()}")

        elif verb == 'select':
            if len(args) > 4:
                raise InvalidInput("Usage: select [column] [needle] [order_by] [asc|desc]")
            rows = self.table.select(*args)
            self._print_results(self.table.columns(), rows)

        elif verb == 'update':
            if len(args) < 2:
                raise InvalidInput("Usage: update <column> <needle> col=value [...]")
            self.table.update(args[0], args[1], _parse_assignments(args[2:]))
            print(f"({self.table.affected_rows()} row(s) affected)")

        elif verb == 'delete':
            if len(args) != 2:
                raise InvalidInput("Usage: delete <column> <needle>")
            self.table.delete(args[0], args[1])
            print(f"({self.table.affected_rows()} row(s) affected)")

        else:
            raise InvalidInput(f"Unknown command: {verb}. Type .help for available commands.")

    def _print_results(self, columns: List[str], rows: List[Dict[str, str]]) -> None:
        """Pretty-print query results as a table."""
        if not rows:
            print("(0 rows)")
            return

        widths = {col: len(col) for col in columns}
        for row in rows:
            for col in columns:
                widths[col] = max(widths[col], len(row.get(col, '')))

        # Limit column width for readability
        max_width = 40
        widths = {col: min(w, max_width) for col, w in widths.items()}

        header = " | ".join(col.ljust(widths[col])[:widths[col]] for col in columns)
        separator = "-+-".join("-" * widths[col] for col in columns)

        print()
        print(header)
        print(separator)

        for row in rows:
            values = [row.get(col, '').ljust(widths[col])[:widths[col]] for col in columns]
            print(" | ".join(values))

        print(f"\n({len(rows)} row(s))")


def _parse_columns(args: List[str]) -> List[tuple]:
    columns = []
    for arg in args:
        name, sep, col_type = arg.partition(':')
        if not sep:
            raise InvalidInput(f'Expected name:type, got "{arg}".')
        columns.append((name, col_type))
    return columns


def _parse_assignments(args: List[str]) -> Dict[str, str]:
    fields = {}
    for arg in args:
        name, sep, value = arg.partition('=')
        if not sep:
            raise InvalidInput(f'Expected col=value, got "{arg}".')
        fields[name] = value
    return fields


def main(argv: Optional[List[str]] = None):
    """Entry point for the shell."""
    import argparse

    parser = argparse.ArgumentParser(
        description="FlatDB - A flat-file record store"
    )
    parser.add_argument(
        '-f', '--file',
        default='./flatdb.db',
        help='Table file to open (default: ./flatdb.db)'
    )
    parser.add_argument(
        '-s', '--separator',
        default=';',
        help='Field separator of the table file (default: ;)'
    )
    parser.add_argument(
        '-i', '--index-key',
        help='Int column to use as auto-increment index key'
    )
    parser.add_argument(
        '-e', '--execute',
        help='Execute one table command and exit'
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Log level (default: WARNING)'
    )
    parser.add_argument(
        '--log-format',
        default='console',
        choices=['console', 'json'],
        help='Log output format (default: console)'
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_format)

    try:
        repl = REPL(args.file, args.separator)
        if args.index_key and repl.table.is_created():
            repl.table.set_index_key(args.index_key)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Execute single command
    if args.execute:
        try:
            repl._dispatch(shlex.split(args.execute))
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        return

    # Start interactive shell
    repl.run()


if __name__ == '__main__':
    main()
