"""Transfer Coordinator: quorum evaluation and ownership migration.

Quorum is evaluated lazily from the owner's approval history; expired
approvals are ignored but never removed here. A successful transfer rebinds
the identity to the new principal and purges the old owner's approval state
inside the caller's transaction.

Dependencies: approvals, directory, errors, events
Wired in: registry.py → Registrar.transfer(), Registrar.approval_status()
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from registrar.approvals import approval_records, purge_approvals
from registrar.directory import find_id, rebind_owner, resolve_id
from registrar.errors import InsufficientApprovals, TargetAlreadyRegistered
from registrar.events import PersonTransferred


@dataclass(frozen=True)
class ApprovalStatus:
    """Snapshot of an owner's standing toward a transfer."""

    owner: str
    valid_approvals: int
    required: int
    approved: bool


def is_approved_for_transfer(
    conn: sqlite3.Connection,
    owner: str,
    *,
    now: int,
    min_approvals: int,
    ttl_seconds: int,
) -> bool:
    valid = 0
    for record in approval_records(conn, owner):
        if record.is_valid_at(now, ttl_seconds):
            valid += 1
            if valid >= min_approvals:
                return True
    return False


def approval_status(
    conn: sqlite3.Connection,
    owner: str,
    *,
    now: int,
    min_approvals: int,
    ttl_seconds: int,
) -> ApprovalStatus:
    resolve_id(conn, owner)
    valid = sum(1 for r in approval_records(conn, owner) if r.is_valid_at(now, ttl_seconds))
    return ApprovalStatus(
        owner=owner,
        valid_approvals=valid,
        required=min_approvals,
        approved=valid >= min_approvals,
    )


def transfer(
    conn: sqlite3.Connection,
    *,
    caller: str,
    to: str,
    now: int,
    min_approvals: int,
    ttl_seconds: int,
) -> PersonTransferred:
    identity_id = resolve_id(conn, caller)
    if find_id(conn, to) is not None:
        raise TargetAlreadyRegistered()
    if not is_approved_for_transfer(
        conn, caller, now=now, min_approvals=min_approvals, ttl_seconds=ttl_seconds
    ):
        raise InsufficientApprovals()

    rebind_owner(conn, identity_id=identity_id, from_principal=caller, to_principal=to)
    purge_approvals(conn, caller)
    return PersonTransferred(
        id=identity_id, from_principal=caller, to_principal=to, emitted_at=now
    )
