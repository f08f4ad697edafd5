"""Shared SQLite connection helpers for the registry store."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path


def open_db(path: Path) -> sqlite3.Connection:
    """Open SQLite with WAL mode and row access by column name."""
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def immediate_transaction(path: Path) -> Iterator[sqlite3.Connection]:
    """Yield a connection holding the write lock for the whole block.

    The transaction commits when the block exits cleanly and rolls back on
    any exception, so callers never observe partial writes.
    """
    with closing(open_db(path)) as conn, conn:
        conn.execute("BEGIN IMMEDIATE")
        yield conn
