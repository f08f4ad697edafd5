"""Signatory Registry: principals entitled to approve an identity's transfer."""

from __future__ import annotations

import sqlite3

from registrar.directory import resolve_id
from registrar.errors import SelfSignatoryNotAllowed


def add_signatory(conn: sqlite3.Connection, *, caller: str, signatory: str) -> int:
    """Add *signatory* to the caller's identity and return the identity id."""
    identity_id = resolve_id(conn, caller)
    if signatory == caller:
        raise SelfSignatoryNotAllowed()
    conn.execute(
        "INSERT OR IGNORE INTO signatories (identity_id, principal) VALUES (?, ?)",
        (identity_id, signatory),
    )
    return identity_id


def is_signatory(conn: sqlite3.Connection, *, identity_id: int, principal: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM signatories WHERE identity_id = ? AND principal = ?",
        (identity_id, principal),
    ).fetchone()
    return row is not None


def list_signatories(conn: sqlite3.Connection, identity_id: int) -> list[str]:
    rows = conn.execute(
        "SELECT principal FROM signatories WHERE identity_id = ? ORDER BY principal",
        (identity_id,),
    ).fetchall()
    return [str(row["principal"]) for row in rows]
