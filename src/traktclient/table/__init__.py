"""Endpoint table loading.

Public API:

- :func:`load_table` -- read and validate a table (bundled default, file,
  URL or stdin).
- :func:`parse_table` -- validate an in-memory mapping.
"""

from traktclient.table.loader import DEFAULT_TABLE_PATH, load_table, parse_table

__all__ = ["DEFAULT_TABLE_PATH", "load_table", "parse_table"]
