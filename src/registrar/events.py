"""Domain events emitted by registry operations.

Events are plain frozen dataclasses. Operations return the events they
produce; the :class:`~registrar.registry.Registrar` persists them in the same
transaction as the state change and hands them to subscribers after commit.

Dependencies: (none — leaf module)
Wired in: directory.py, access.py, transfer.py, registry.py
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, cast


@dataclass(frozen=True)
class PersonRegistered:
    id: int
    emitted_at: int

    kind = "PersonRegistered"


@dataclass(frozen=True)
class ViewerAuthorized:
    id: int
    viewer: str
    emitted_at: int

    kind = "ViewerAuthorized"


@dataclass(frozen=True)
class PersonTransferred:
    id: int
    from_principal: str
    to_principal: str
    emitted_at: int

    kind = "PersonTransferred"


RegistryEvent = PersonRegistered | ViewerAuthorized | PersonTransferred
EventSink = Callable[[RegistryEvent], None]

_EVENT_TYPES: dict[str, type[RegistryEvent]] = {
    cls.kind: cls for cls in (PersonRegistered, ViewerAuthorized, PersonTransferred)
}


def event_to_dict(event: RegistryEvent) -> dict[str, Any]:
    """Return a JSON-friendly dict including the event ``kind``."""
    return {"kind": event.kind, **asdict(event)}


def append_event(conn: sqlite3.Connection, event: RegistryEvent) -> int:
    """Append *event* to the event log and return its sequence number."""
    fields = asdict(event)
    cursor = conn.execute(
        """
        INSERT INTO registry_events (kind, identity_id, body_json, emitted_at)
        VALUES (?, ?, ?, ?)
        """,
        (
            event.kind,
            event.id,
            json.dumps(fields, sort_keys=True, separators=(",", ":")),
            event.emitted_at,
        ),
    )
    return cast(int, cursor.lastrowid)


def load_events(
    conn: sqlite3.Connection, *, since_seq: int = 0
) -> list[tuple[int, RegistryEvent]]:
    """Return ``(seq, event)`` pairs with ``seq > since_seq`` in emission order."""
    rows = conn.execute(
        """
        SELECT seq, kind, body_json
        FROM registry_events
        WHERE seq > ?
        ORDER BY seq
        """,
        (since_seq,),
    ).fetchall()
    out: list[tuple[int, RegistryEvent]] = []
    for row in rows:
        event_type = _EVENT_TYPES[str(row["kind"])]
        body = cast(dict[str, Any], json.loads(str(row["body_json"])))
        out.append((int(row["seq"]), event_type(**body)))
    return out
