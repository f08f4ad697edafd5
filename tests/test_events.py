"""Tests for event persistence and subscriber delivery."""

from __future__ import annotations

import pytest

from registrar import (
    AlreadyRegistered,
    PersonRegistered,
    Registrar,
    ViewerAuthorized,
)
from registrar.events import RegistryEvent, event_to_dict

_START = 1_700_000_000


def test_events_are_persisted_in_order(registrar: Registrar) -> None:
    registrar.register("p1", {"k": "v"})
    registrar.grant_viewer("p1", "p2")

    assert registrar.events() == [
        (1, PersonRegistered(id=1, emitted_at=_START)),
        (2, ViewerAuthorized(id=1, viewer="p2", emitted_at=_START)),
    ]
    assert registrar.events(since_seq=1) == [
        (2, ViewerAuthorized(id=1, viewer="p2", emitted_at=_START)),
    ]


def test_rejected_operation_emits_nothing(
    registrar: Registrar, emitted: list[RegistryEvent]
) -> None:
    registrar.register("p1", {"k": "v"})
    with pytest.raises(AlreadyRegistered):
        registrar.register("p1", {"k": "v"})
    assert len(emitted) == 1
    assert len(registrar.events()) == 1


def test_failing_subscriber_does_not_break_others(
    registrar: Registrar, caplog: pytest.LogCaptureFixture
) -> None:
    received: list[RegistryEvent] = []

    def _broken(event: RegistryEvent) -> None:
        raise RuntimeError("subscriber down")

    registrar.subscribe(_broken)
    registrar.subscribe(received.append)

    assert registrar.register("p1", {"k": "v"}) == 1
    assert received == [PersonRegistered(id=1, emitted_at=_START)]
    assert "Event subscriber failed" in caplog.text


def test_unsubscribe_stops_delivery(registrar: Registrar) -> None:
    received: list[RegistryEvent] = []
    registrar.subscribe(received.append)
    registrar.unsubscribe(received.append)
    registrar.register("p1", {"k": "v"})
    assert received == []


def test_event_to_dict_includes_kind() -> None:
    event = ViewerAuthorized(id=3, viewer="p2", emitted_at=10)
    assert event_to_dict(event) == {
        "kind": "ViewerAuthorized",
        "id": 3,
        "viewer": "p2",
        "emitted_at": 10,
    }


def test_events_survive_reopen(registrar: Registrar) -> None:
    registrar.register("p1", {"k": "v"})
    reopened = Registrar(registrar.config)
    assert [event.kind for _, event in reopened.events()] == ["PersonRegistered"]
    assert reopened.resolve_owner(1) == "p1"
