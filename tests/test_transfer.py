"""Tests for quorum evaluation and ownership transfer."""

from __future__ import annotations

from pathlib import Path

import pytest

from registrar import (
    InsufficientApprovals,
    ManualClock,
    NotRegistered,
    PersonTransferred,
    Registrar,
    RegistrarConfig,
    TargetAlreadyRegistered,
    Unauthorized,
)
from registrar.events import RegistryEvent

_START = 1_700_000_000
_TTL = 24 * 3600
_RECORD = {"first_name": "a", "last_name": "b", "birthdate": 1}


@pytest.fixture()
def owned(registrar: Registrar) -> Registrar:
    """p1 registered with p2, p3 and p4 as signatories."""
    registrar.register("p1", _RECORD)
    for signatory in ("p2", "p3", "p4"):
        registrar.add_signatory("p1", signatory)
    return registrar


def _approve_at(registrar: Registrar, clock: ManualClock, history: list[tuple[str, int]]) -> None:
    for signatory, offset in sorted(history, key=lambda item: item[1]):
        clock.set(_START + offset)
        registrar.approve_transfer(signatory, "p1")


@pytest.mark.parametrize(
    ("history", "transfer_at"),
    [
        ([], 0),
        ([("p2", 0)], 0),
        ([("p2", 0), ("p3", 0)], 0),
        ([("p2", 0), ("p3", 0)], _TTL - 1),
        ([("p2", 0), ("p3", 0)], _TTL),
        ([("p2", 0), ("p2", _TTL), ("p3", _TTL)], _TTL + 10),
        ([("p2", 0), ("p3", 10), ("p2", _TTL)], _TTL + 5),
        ([("p2", 0), ("p3", 10), ("p2", _TTL)], _TTL + 10),
        ([("p2", 0), ("p3", 100), ("p4", 200)], _TTL + 150),
        ([("p2", 0), ("p3", 100), ("p4", 200)], _TTL + 50),
    ],
)
def test_transfer_succeeds_iff_quorum_of_fresh_approvals(
    owned: Registrar,
    clock: ManualClock,
    history: list[tuple[str, int]],
    transfer_at: int,
) -> None:
    _approve_at(owned, clock, history)
    clock.set(_START + transfer_at)
    fresh = sum(1 for _, offset in history if offset + _TTL > transfer_at)

    assert owned.is_approved_for_transfer("p1") is (fresh >= 2)
    status = owned.approval_status("p1")
    assert status.valid_approvals == fresh
    assert status.approved is (fresh >= 2)

    if fresh >= 2:
        owned.transfer("p1", "p9")
        assert owned.resolve_owner(1) == "p9"
    else:
        with pytest.raises(InsufficientApprovals, match="Not approved for transfer."):
            owned.transfer("p1", "p9")
        assert owned.resolve_owner(1) == "p1"


def test_quorum_check_does_not_remove_expired_records(
    owned: Registrar, clock: ManualClock
) -> None:
    _approve_at(owned, clock, [("p2", 0), ("p3", 0)])
    clock.advance(_TTL)
    assert owned.is_approved_for_transfer("p1") is False
    assert len(owned.approval_records("p1")) == 2


def test_transfer_cleans_up_previous_owner_state(
    owned: Registrar, clock: ManualClock, emitted: list[RegistryEvent]
) -> None:
    owned.grant_viewer("p1", "p7")
    _approve_at(owned, clock, [("p2", 0), ("p3", 0)])

    event = owned.transfer("p1", "p9")

    assert event == PersonTransferred(
        id=1, from_principal="p1", to_principal="p9", emitted_at=_START
    )
    assert emitted[-1] == event
    assert owned.approval_records("p1") == []
    assert owned.last_approval("p1", "p2") is None
    assert owned.last_approval("p1", "p3") is None
    assert owned.resolve_id("p9") == 1
    with pytest.raises(NotRegistered):
        owned.resolve_id("p1")

    # viewers and signatories belong to the identity, not the address
    assert owned.view("p9", 1) == _RECORD
    assert owned.view("p7", 1) == _RECORD
    assert owned.signatories("p9") == ["p2", "p3", "p4"]
    with pytest.raises(Unauthorized):
        owned.view("p1", 1)

    # the old address is free to register again
    assert owned.register("p1", {"first_name": "n", "last_name": "m", "birthdate": 3}) == 2


def test_new_owner_starts_without_approvals(owned: Registrar, clock: ManualClock) -> None:
    _approve_at(owned, clock, [("p2", 0), ("p3", 0)])
    owned.transfer("p1", "p9")
    assert owned.approval_records("p9") == []
    assert owned.is_approved_for_transfer("p9") is False
    # the cooldown of the previous owner does not carry over
    owned.approve_transfer("p2", "p9")
    owned.approve_transfer("p3", "p9")
    owned.transfer("p9", "p10")
    assert owned.resolve_owner(1) == "p10"


def test_transfer_requires_registered_caller(registrar: Registrar) -> None:
    with pytest.raises(NotRegistered, match="User does not exist."):
        registrar.transfer("p1", "p2")


def test_transfer_to_registered_target_is_rejected(owned: Registrar, clock: ManualClock) -> None:
    owned.register("p5", {"first_name": "c", "last_name": "d", "birthdate": 2})
    _approve_at(owned, clock, [("p2", 0), ("p3", 0)])
    with pytest.raises(TargetAlreadyRegistered, match="already registered for this address"):
        owned.transfer("p1", "p5")
    with pytest.raises(TargetAlreadyRegistered):
        owned.transfer("p1", "p1")
    assert len(owned.approval_records("p1")) == 2


def test_target_check_precedes_quorum_check(owned: Registrar) -> None:
    owned.register("p5", _RECORD)
    with pytest.raises(TargetAlreadyRegistered):
        owned.transfer("p1", "p5")


def test_failed_transfer_rolls_back_every_write(
    owned: Registrar,
    clock: ManualClock,
    emitted: list[RegistryEvent],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _approve_at(owned, clock, [("p2", 0), ("p3", 0)])
    delivered_before = len(emitted)
    persisted_before = len(owned.events())

    def _boom(conn: object, owner: str) -> int:
        raise RuntimeError("disk full")

    monkeypatch.setattr("registrar.transfer.purge_approvals", _boom)
    with pytest.raises(RuntimeError, match="disk full"):
        owned.transfer("p1", "p9")

    assert owned.resolve_owner(1) == "p1"
    assert len(owned.approval_records("p1")) == 2
    assert len(owned.events()) == persisted_before
    assert len(emitted) == delivered_before


def test_configurable_quorum(tmp_path: Path, clock: ManualClock) -> None:
    registrar = Registrar(
        RegistrarConfig(db_path=tmp_path / "q3.sqlite", min_approvals=3), clock=clock
    )
    registrar.register("p1", _RECORD)
    for signatory in ("p2", "p3", "p4"):
        registrar.add_signatory("p1", signatory)
    registrar.approve_transfer("p2", "p1")
    registrar.approve_transfer("p3", "p1")
    with pytest.raises(InsufficientApprovals):
        registrar.transfer("p1", "p9")
    registrar.approve_transfer("p4", "p1")
    registrar.transfer("p1", "p9")
    assert registrar.resolve_owner(1) == "p9"
