#!/usr/bin/env python3
"""
FlatDB - A flat-file record store
Entry point script

Run the shell:
    python -m flatdb -f users.db

Or use as a library:
    from flatdb import Table
    table = Table("users.db")
    table.select("name", "=Alice")
"""

from flatdb.core.repl import main

if __name__ == '__main__':
    main()
