"""Registry facade: the single entry point for every registry operation.

``Registrar`` owns the database location, the clock, the quorum settings and
the event subscribers. Each public method runs as one indivisible unit: a
process-wide lock serializes callers and a ``BEGIN IMMEDIATE`` transaction
makes the SQLite write all-or-nothing. Events produced by an operation are
written to the event log in that same transaction and delivered to
subscribers only after it commits.

Dependencies: access, approvals, clock, config, db, directory, events,
    signatories, store, transfer
Wired in: server/app.py → get_registrar()
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path

from registrar import access, approvals, directory, signatories, transfer
from registrar.approvals import ApprovalRecord
from registrar.clock import Clock, system_clock
from registrar.config import RegistrarConfig, load_config
from registrar.db import immediate_transaction, open_db
from registrar.directory import Payload
from registrar.errors import RegistrarError
from registrar.events import (
    EventSink,
    PersonTransferred,
    RegistryEvent,
    append_event,
    load_events,
)
from registrar.store import init_schema
from registrar.transfer import ApprovalStatus

_log = logging.getLogger(__name__)


class Registrar:
    """Identity registry with quorum-gated ownership transfer."""

    def __init__(self, config: RegistrarConfig, *, clock: Clock = system_clock) -> None:
        self._config = config
        self._clock = clock
        self._lock = threading.Lock()
        self._sinks: list[EventSink] = []
        self._sinks_lock = threading.Lock()
        self._config.db_path.parent.mkdir(parents=True, exist_ok=True)
        with immediate_transaction(self._config.db_path) as conn:
            init_schema(conn)

    @classmethod
    def open(cls, config: RegistrarConfig, *, clock: Clock = system_clock) -> Registrar:
        registrar = cls(config, clock=clock)
        _log.info(
            "Registry ready at %s (quorum=%d, ttl=%ds)",
            config.db_path,
            config.min_approvals,
            config.approval_ttl_seconds,
        )
        return registrar

    @property
    def config(self) -> RegistrarConfig:
        return self._config

    # --- Event subscription ---

    def subscribe(self, sink: EventSink) -> None:
        """Deliver every committed event to *sink*."""
        with self._sinks_lock:
            self._sinks.append(sink)

    def unsubscribe(self, sink: EventSink) -> None:
        with self._sinks_lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    def events(self, *, since_seq: int = 0) -> list[tuple[int, RegistryEvent]]:
        """Return persisted events after *since_seq*, oldest first."""
        with self._read() as conn:
            return load_events(conn, since_seq=since_seq)

    # --- Identity Directory ---

    def register(self, caller: str, payload: Payload) -> int:
        with self._write() as (conn, now):
            identity_id, event = directory.register(conn, caller=caller, payload=payload, now=now)
            append_event(conn, event)
        _log.info("Registered identity %d for %s", identity_id, caller)
        self._publish([event])
        return identity_id

    def resolve_id(self, principal: str) -> int:
        with self._read() as conn:
            return directory.resolve_id(conn, principal)

    def resolve_owner(self, identity_id: int) -> str:
        with self._read() as conn:
            return directory.resolve_owner(conn, identity_id)

    # --- Access Control Ledger ---

    def grant_viewer(self, caller: str, viewer: str) -> None:
        with self._write() as (conn, now):
            event = access.grant_viewer(conn, caller=caller, viewer=viewer, now=now)
            append_event(conn, event)
        _log.debug("Identity %d: %s may now view", event.id, viewer)
        self._publish([event])

    def view(self, caller: str, identity_id: int) -> Payload:
        with self._read() as conn:
            return access.view(conn, caller=caller, identity_id=identity_id)

    def viewers(self, caller: str) -> list[str]:
        """Explicit viewers of the caller's own identity."""
        with self._read() as conn:
            return access.list_viewers(conn, directory.resolve_id(conn, caller))

    # --- Signatory Registry ---

    def add_signatory(self, caller: str, signatory: str) -> None:
        with self._write() as (conn, _now):
            identity_id = signatories.add_signatory(conn, caller=caller, signatory=signatory)
        _log.debug("Identity %d: added signatory %s", identity_id, signatory)

    def signatories(self, caller: str) -> list[str]:
        """Signatories of the caller's own identity."""
        with self._read() as conn:
            return signatories.list_signatories(conn, directory.resolve_id(conn, caller))

    # --- Approval Tracker ---

    def approve_transfer(self, caller: str, for_owner: str) -> ApprovalRecord:
        with self._write() as (conn, now):
            record = approvals.approve_transfer(
                conn,
                caller=caller,
                for_owner=for_owner,
                now=now,
                ttl_seconds=self._config.approval_ttl_seconds,
            )
        _log.debug("%s approved transfer for %s at %d", caller, for_owner, record.approved_at)
        return record

    def approval_records(self, owner: str) -> list[ApprovalRecord]:
        with self._read() as conn:
            return approvals.approval_records(conn, owner)

    def last_approval(self, owner: str, signatory: str) -> int | None:
        with self._read() as conn:
            return approvals.last_approval(conn, owner=owner, signatory=signatory)

    # --- Transfer Coordinator ---

    def is_approved_for_transfer(self, owner: str) -> bool:
        with self._read() as conn:
            return transfer.is_approved_for_transfer(
                conn,
                owner,
                now=self._clock(),
                min_approvals=self._config.min_approvals,
                ttl_seconds=self._config.approval_ttl_seconds,
            )

    def approval_status(self, owner: str) -> ApprovalStatus:
        with self._read() as conn:
            return transfer.approval_status(
                conn,
                owner,
                now=self._clock(),
                min_approvals=self._config.min_approvals,
                ttl_seconds=self._config.approval_ttl_seconds,
            )

    def transfer(self, caller: str, to: str) -> PersonTransferred:
        try:
            with self._write() as (conn, now):
                event = transfer.transfer(
                    conn,
                    caller=caller,
                    to=to,
                    now=now,
                    min_approvals=self._config.min_approvals,
                    ttl_seconds=self._config.approval_ttl_seconds,
                )
                append_event(conn, event)
        except RegistrarError as exc:
            _log.warning("Transfer from %s to %s rejected: %s", caller, to, exc.code)
            raise
        _log.info("Transferred identity %d from %s to %s", event.id, caller, to)
        self._publish([event])
        return event

    # --- Internals ---

    @contextmanager
    def _write(self) -> Iterator[tuple[sqlite3.Connection, int]]:
        with self._lock, immediate_transaction(self._config.db_path) as conn:
            yield conn, self._clock()

    @contextmanager
    def _read(self) -> Iterator[sqlite3.Connection]:
        with self._lock, closing(self._connect()) as conn:
            yield conn

    def _connect(self) -> sqlite3.Connection:
        return open_db(self._config.db_path)

    def _publish(self, events: list[RegistryEvent]) -> None:
        with self._sinks_lock:
            sinks = list(self._sinks)
        for event in events:
            for sink in sinks:
                try:
                    sink(event)
                except Exception:
                    _log.exception("Event subscriber failed for %s", event.kind)


def open_registrar(base_dir: Path, *, clock: Clock = system_clock) -> Registrar:
    """Open the registry described by ``registrar.toml`` or the environment."""
    return Registrar.open(load_config(base_dir / "registrar.toml", base_dir=base_dir), clock=clock)
