"""Approval Tracker: per-owner approval history and signatory cooldowns.

Approvals are keyed by the owning *principal*, not by identity id. Each call
to :func:`approve_transfer` appends one record to the owner's ordered list
and refreshes the ``(owner, signatory)`` last-approval instant used for the
cooldown. Nothing here expires records; the transfer check reads them lazily.

Dependencies: directory, errors, signatories
Wired in: registry.py → Registrar.approve_transfer(), transfer.py
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from registrar.directory import resolve_id
from registrar.errors import CooldownActive, Unauthorized
from registrar.signatories import is_signatory


@dataclass(frozen=True)
class ApprovalRecord:
    """One approval event recorded against an owner."""

    signatory: str
    approved_at: int

    def is_valid_at(self, now: int, ttl_seconds: int) -> bool:
        """True while the approval still counts toward quorum."""
        return self.approved_at + ttl_seconds > now


def approve_transfer(
    conn: sqlite3.Connection,
    *,
    caller: str,
    for_owner: str,
    now: int,
    ttl_seconds: int,
) -> ApprovalRecord:
    identity_id = resolve_id(conn, for_owner)
    if not is_signatory(conn, identity_id=identity_id, principal=caller):
        raise Unauthorized("You are not a signatory for this account.")

    previous = last_approval(conn, owner=for_owner, signatory=caller)
    if previous is not None and now < previous + ttl_seconds:
        raise CooldownActive(ttl_seconds)

    conn.execute(
        "INSERT INTO approvals (owner, signatory, approved_at) VALUES (?, ?, ?)",
        (for_owner, caller, now),
    )
    conn.execute(
        """
        INSERT INTO last_approvals (owner, signatory, approved_at) VALUES (?, ?, ?)
        ON CONFLICT (owner, signatory) DO UPDATE SET approved_at = excluded.approved_at
        """,
        (for_owner, caller, now),
    )
    return ApprovalRecord(signatory=caller, approved_at=now)


def approval_records(conn: sqlite3.Connection, owner: str) -> list[ApprovalRecord]:
    """Return the owner's approvals in insertion order."""
    rows = conn.execute(
        "SELECT signatory, approved_at FROM approvals WHERE owner = ? ORDER BY seq",
        (owner,),
    ).fetchall()
    return [
        ApprovalRecord(signatory=str(row["signatory"]), approved_at=int(row["approved_at"]))
        for row in rows
    ]


def last_approval(conn: sqlite3.Connection, *, owner: str, signatory: str) -> int | None:
    row = conn.execute(
        "SELECT approved_at FROM last_approvals WHERE owner = ? AND signatory = ?",
        (owner, signatory),
    ).fetchone()
    return None if row is None else int(row["approved_at"])


def purge_approvals(conn: sqlite3.Connection, owner: str) -> int:
    """Drop all approval state recorded under *owner*.

    Last-approval entries are removed for every signatory that appears in the
    owner's approval list, then the list itself is cleared. Returns the
    number of approval records removed.
    """
    conn.execute(
        """
        DELETE FROM last_approvals
        WHERE owner = ?
          AND signatory IN (SELECT signatory FROM approvals WHERE owner = ?)
        """,
        (owner, owner),
    )
    deleted = conn.execute("DELETE FROM approvals WHERE owner = ?", (owner,))
    return deleted.rowcount
