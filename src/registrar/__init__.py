"""Identity registry with quorum-gated ownership transfer.

Public API: ApprovalRecord, ApprovalStatus, ManualClock, Registrar,
    RegistrarConfig, RegistrarError (and subclasses), open_registrar,
    system_clock, PersonRegistered, PersonTransferred, ViewerAuthorized
Internal: access, approvals, db, directory, signatories, store, transfer
"""

from registrar.approvals import ApprovalRecord
from registrar.clock import ManualClock, system_clock
from registrar.config import RegistrarConfig, load_config
from registrar.errors import (
    AlreadyRegistered,
    CooldownActive,
    InsufficientApprovals,
    NotRegistered,
    RegistrarError,
    SelfSignatoryNotAllowed,
    TargetAlreadyRegistered,
    Unauthorized,
)
from registrar.events import PersonRegistered, PersonTransferred, ViewerAuthorized
from registrar.registry import Registrar, open_registrar
from registrar.transfer import ApprovalStatus

__all__ = [
    "AlreadyRegistered",
    "ApprovalRecord",
    "ApprovalStatus",
    "CooldownActive",
    "InsufficientApprovals",
    "ManualClock",
    "NotRegistered",
    "PersonRegistered",
    "PersonTransferred",
    "Registrar",
    "RegistrarConfig",
    "RegistrarError",
    "SelfSignatoryNotAllowed",
    "TargetAlreadyRegistered",
    "Unauthorized",
    "ViewerAuthorized",
    "load_config",
    "open_registrar",
    "system_clock",
]
