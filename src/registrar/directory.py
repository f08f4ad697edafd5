"""Identity Directory: principal → identity id, id → record.

Enforces at most one identity per principal. Ownership is stored only in the
``owners`` table (principal → id); the id → owner direction is derived.

Dependencies: errors, events
Wired in: registry.py → Registrar.register(), access.py, signatories.py,
    approvals.py, transfer.py
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any, cast

from registrar.errors import AlreadyRegistered, NotRegistered
from registrar.events import PersonRegistered

Payload = dict[str, Any]


def register(
    conn: sqlite3.Connection, *, caller: str, payload: Payload, now: int
) -> tuple[int, PersonRegistered]:
    """Create a new identity owned by *caller* and return ``(id, event)``."""
    if find_id(conn, caller) is not None:
        raise AlreadyRegistered()
    cursor = conn.execute(
        "INSERT INTO identities (payload_json, created_at) VALUES (?, ?)",
        (_encode_payload(payload), now),
    )
    identity_id = cast(int, cursor.lastrowid)
    conn.execute(
        "INSERT INTO owners (principal, identity_id) VALUES (?, ?)",
        (caller, identity_id),
    )
    return identity_id, PersonRegistered(id=identity_id, emitted_at=now)


def find_id(conn: sqlite3.Connection, principal: str) -> int | None:
    row = conn.execute(
        "SELECT identity_id FROM owners WHERE principal = ?",
        (principal,),
    ).fetchone()
    return None if row is None else int(row["identity_id"])


def find_owner(conn: sqlite3.Connection, identity_id: int) -> str | None:
    row = conn.execute(
        "SELECT principal FROM owners WHERE identity_id = ?",
        (identity_id,),
    ).fetchone()
    return None if row is None else str(row["principal"])


def resolve_id(conn: sqlite3.Connection, principal: str) -> int:
    """Return the id owned by *principal* or raise :class:`NotRegistered`."""
    identity_id = find_id(conn, principal)
    if identity_id is None:
        raise NotRegistered()
    return identity_id


def resolve_owner(conn: sqlite3.Connection, identity_id: int) -> str:
    """Return the current owner of *identity_id* or raise :class:`NotRegistered`."""
    owner = find_owner(conn, identity_id)
    if owner is None:
        raise NotRegistered()
    return owner


def load_payload(conn: sqlite3.Connection, identity_id: int) -> Payload | None:
    row = conn.execute(
        "SELECT payload_json FROM identities WHERE id = ?",
        (identity_id,),
    ).fetchone()
    if row is None:
        return None
    return cast(Payload, json.loads(str(row["payload_json"])))


def rebind_owner(
    conn: sqlite3.Connection, *, identity_id: int, from_principal: str, to_principal: str
) -> None:
    """Move *identity_id* from one principal to another in place."""
    updated = conn.execute(
        "UPDATE owners SET principal = ? WHERE principal = ? AND identity_id = ?",
        (to_principal, from_principal, identity_id),
    )
    if updated.rowcount != 1:
        raise NotRegistered()


def _encode_payload(payload: Payload) -> str:
    return json.dumps(payload, sort_keys=True, ensure_ascii=True, allow_nan=False)
