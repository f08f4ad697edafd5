"""Registry configuration loading.

Settings come from a ``registrar.toml`` file when one exists, otherwise from
environment variables. Quorum size and approval TTL are tunable; the defaults
are two approvals valid for 24 hours.

Dependencies: (none — leaf module)
Wired in: registry.py → Registrar.open(), server/app.py → get_registrar()
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import cast

DEFAULT_MIN_APPROVALS = 2
DEFAULT_APPROVAL_TTL_SECONDS = 24 * 3600
_DEFAULT_DB_RELATIVE_PATH = "data/registrar.sqlite"


@dataclass(frozen=True)
class RegistrarConfig:
    """Immutable registry settings."""

    db_path: Path
    """SQLite database file holding all registry state."""

    min_approvals: int = DEFAULT_MIN_APPROVALS
    """Number of unexpired approvals required before a transfer."""

    approval_ttl_seconds: int = DEFAULT_APPROVAL_TTL_SECONDS
    """How long an approval counts toward quorum, and the per-signatory cooldown."""

    def __post_init__(self) -> None:
        if self.min_approvals <= 0:
            raise ValueError("min_approvals must be > 0")
        if self.approval_ttl_seconds <= 0:
            raise ValueError("approval_ttl_seconds must be > 0")

    @classmethod
    def from_env(cls, *, base_dir: Path) -> RegistrarConfig:
        return cls(
            db_path=_resolve_db_path(base_dir, os.getenv("REGISTRAR_DB_PATH")),
            min_approvals=_read_positive_int("REGISTRAR_MIN_APPROVALS", DEFAULT_MIN_APPROVALS),
            approval_ttl_seconds=_read_positive_int(
                "REGISTRAR_APPROVAL_TTL_SECONDS", DEFAULT_APPROVAL_TTL_SECONDS
            ),
        )


def load_config(path: Path, *, base_dir: Path) -> RegistrarConfig:
    """Load settings from the ``[registrar]`` table of a TOML file.

    Falls back to :meth:`RegistrarConfig.from_env` when *path* does not exist.
    Keys missing from the file keep their defaults.
    """
    if not path.exists():
        return RegistrarConfig.from_env(base_dir=base_dir)

    with path.open("rb") as fh:
        raw = tomllib.load(fh)

    section_raw: object = raw.get("registrar", {})
    if not isinstance(section_raw, dict):
        raise SystemExit(f"{path}: [registrar] must be a table.")
    section = cast(dict[str, object], section_raw)

    db_raw = section.get("db_path")
    if db_raw is not None and not isinstance(db_raw, str):
        raise SystemExit(f"{path}: registrar.db_path must be a string.")

    return RegistrarConfig(
        db_path=_resolve_db_path(base_dir, db_raw),
        min_approvals=_toml_positive_int(
            path, section, "min_approvals", DEFAULT_MIN_APPROVALS
        ),
        approval_ttl_seconds=_toml_positive_int(
            path, section, "approval_ttl_seconds", DEFAULT_APPROVAL_TTL_SECONDS
        ),
    )


def _toml_positive_int(path: Path, section: dict[str, object], key: str, default: int) -> int:
    value = section.get(key, default)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise SystemExit(f"{path}: registrar.{key} must be an integer.")
    if value <= 0:
        raise SystemExit(f"{path}: registrar.{key} must be > 0.")
    return value


def _read_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise SystemExit(f"{name} must be an integer.") from exc
    if value <= 0:
        raise SystemExit(f"{name} must be > 0.")
    return value


def _resolve_db_path(base_dir: Path, explicit: str | None) -> Path:
    if explicit:
        path = Path(explicit)
        resolved = path if path.is_absolute() else (base_dir / path)
        return resolved.resolve()
    return (base_dir / _DEFAULT_DB_RELATIVE_PATH).resolve()
