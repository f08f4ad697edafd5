"""Schema creation and version checks for the registry database.

Logical layout: identities keyed by id; owners keyed by principal; viewer and
signatory sets keyed by identity id; approvals and last-approval timestamps
keyed by the owning principal; an append-only event log.
"""

from __future__ import annotations

import sqlite3

SCHEMA_VERSION = 1

_EXPECTED_COLUMNS: dict[str, set[str]] = {
    "identities": {"id", "payload_json", "created_at"},
    "owners": {"principal", "identity_id"},
    "viewers": {"identity_id", "principal"},
    "signatories": {"identity_id", "principal"},
    "approvals": {"seq", "owner", "signatory", "approved_at"},
    "last_approvals": {"owner", "signatory", "approved_at"},
    "registry_events": {"seq", "kind", "identity_id", "body_json", "emitted_at"},
}


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the registry tables, or verify an existing database matches."""
    version = int(conn.execute("PRAGMA user_version").fetchone()[0])
    if version == 0 and not _table_exists(conn, "identities"):
        _create_schema(conn)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        return
    if version != SCHEMA_VERSION:
        raise SystemExit(
            f"Unsupported registry schema version {version} (expected {SCHEMA_VERSION})."
        )
    for table, expected in _EXPECTED_COLUMNS.items():
        if _columns(conn, table) != expected:
            raise SystemExit(f"Registry table {table!r} does not match the expected schema.")


def _create_schema(conn: sqlite3.Connection) -> None:
    # AUTOINCREMENT keeps identity ids strictly increasing and never reused.
    conn.execute(
        """
        CREATE TABLE identities (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            payload_json TEXT NOT NULL,
            created_at INTEGER NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE owners (
            principal TEXT PRIMARY KEY,
            identity_id INTEGER NOT NULL UNIQUE REFERENCES identities(id)
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE viewers (
            identity_id INTEGER NOT NULL REFERENCES identities(id),
            principal TEXT NOT NULL,
            PRIMARY KEY (identity_id, principal)
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE signatories (
            identity_id INTEGER NOT NULL REFERENCES identities(id),
            principal TEXT NOT NULL,
            PRIMARY KEY (identity_id, principal)
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE approvals (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            owner TEXT NOT NULL,
            signatory TEXT NOT NULL,
            approved_at INTEGER NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX approvals_owner_idx ON approvals (owner, seq)")
    conn.execute(
        """
        CREATE TABLE last_approvals (
            owner TEXT NOT NULL,
            signatory TEXT NOT NULL,
            approved_at INTEGER NOT NULL,
            PRIMARY KEY (owner, signatory)
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE registry_events (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            kind TEXT NOT NULL,
            identity_id INTEGER NOT NULL,
            body_json TEXT NOT NULL,
            emitted_at INTEGER NOT NULL
        )
        """
    )


def _table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name = ?",
        (table_name,),
    ).fetchone()
    return row is not None


def _columns(conn: sqlite3.Connection, table_name: str) -> set[str]:
    rows = conn.execute(f"PRAGMA table_info({table_name})").fetchall()
    return {str(row[1]) for row in rows}
