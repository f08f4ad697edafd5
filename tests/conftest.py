"""Shared test fixtures for the registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from registrar import ManualClock, Registrar, RegistrarConfig
from registrar.events import RegistryEvent

START = 1_700_000_000
TTL_SECONDS = 24 * 3600


@pytest.fixture()
def clock() -> ManualClock:
    """Clock frozen at a fixed instant until advanced."""
    return ManualClock(START)


@pytest.fixture()
def config(tmp_path: Path) -> RegistrarConfig:
    return RegistrarConfig(db_path=tmp_path / "data" / "registrar.sqlite")


@pytest.fixture()
def registrar(config: RegistrarConfig, clock: ManualClock) -> Registrar:
    return Registrar.open(config, clock=clock)


@pytest.fixture()
def emitted(registrar: Registrar) -> list[RegistryEvent]:
    """Events delivered to a subscriber, in delivery order."""
    received: list[RegistryEvent] = []
    registrar.subscribe(received.append)
    return received

