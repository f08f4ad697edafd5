"""Access Control Ledger: who may read an identity's payload.

Viewer sets are keyed by identity id, not by owner, so they survive
ownership transfers unchanged. The current owner is always a viewer.

Dependencies: directory, errors, events
Wired in: registry.py → Registrar.grant_viewer(), Registrar.view()
"""

from __future__ import annotations

import sqlite3

from registrar.directory import Payload, find_owner, load_payload, resolve_id
from registrar.errors import NotRegistered, Unauthorized
from registrar.events import ViewerAuthorized


def grant_viewer(
    conn: sqlite3.Connection, *, caller: str, viewer: str, now: int
) -> ViewerAuthorized:
    identity_id = resolve_id(conn, caller)
    conn.execute(
        "INSERT OR IGNORE INTO viewers (identity_id, principal) VALUES (?, ?)",
        (identity_id, viewer),
    )
    return ViewerAuthorized(id=identity_id, viewer=viewer, emitted_at=now)


def can_view(conn: sqlite3.Connection, *, caller: str, identity_id: int) -> bool:
    if find_owner(conn, identity_id) == caller:
        return True
    row = conn.execute(
        "SELECT 1 FROM viewers WHERE identity_id = ? AND principal = ?",
        (identity_id, caller),
    ).fetchone()
    return row is not None


def view(conn: sqlite3.Connection, *, caller: str, identity_id: int) -> Payload:
    payload = load_payload(conn, identity_id)
    if payload is None:
        raise NotRegistered()
    if not can_view(conn, caller=caller, identity_id=identity_id):
        raise Unauthorized()
    return payload


def list_viewers(conn: sqlite3.Connection, identity_id: int) -> list[str]:
    rows = conn.execute(
        "SELECT principal FROM viewers WHERE identity_id = ? ORDER BY principal",
        (identity_id,),
    ).fetchall()
    return [str(row["principal"]) for row in rows]
