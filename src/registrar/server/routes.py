"""Route handlers for the registry API."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Response, status

from registrar.registry import Registrar
from registrar.server.models import (
    ApprovalResponse,
    ApprovalStatusResponse,
    ApproveRequest,
    EventEntry,
    HealthResponse,
    PersonRecord,
    RegisterResponse,
    SignatoryRequest,
    TransferRequest,
    TransferResponse,
    ViewerRequest,
)
from registrar.server.principal import caller_principal

_log = logging.getLogger(__name__)

router = APIRouter()

# Set by ``configure_routes`` before the app starts serving.
_registrar: Registrar | None = None


def configure_routes(registrar: Registrar | None) -> None:
    """Bind the registry used by all route handlers."""
    global _registrar
    _registrar = registrar


def _current() -> Registrar:
    if _registrar is None:
        raise RuntimeError("Registry routes used before configure_routes()")
    return _registrar


# --- Health ---


@router.get("/api/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse()


# --- Identities ---


@router.post(
    "/api/identities",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(record: PersonRecord, caller: str = Depends(caller_principal)) -> RegisterResponse:
    """Register the caller's identity."""
    identity_id = _current().register(caller, record.model_dump())
    return RegisterResponse(id=identity_id)


@router.get("/api/identities/{identity_id}", response_model=dict[str, Any])
def view(identity_id: int, caller: str = Depends(caller_principal)) -> dict[str, Any]:
    """Return an identity's record if the caller may view it."""
    return _current().view(caller, identity_id)


# --- Viewers and signatories ---


@router.post("/api/viewers", status_code=status.HTTP_204_NO_CONTENT)
def grant_viewer(request: ViewerRequest, caller: str = Depends(caller_principal)) -> Response:
    """Allow another principal to view the caller's identity."""
    _current().grant_viewer(caller, request.viewer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/viewers", response_model=list[str])
def list_viewers(caller: str = Depends(caller_principal)) -> list[str]:
    return _current().viewers(caller)


@router.post("/api/signatories", status_code=status.HTTP_204_NO_CONTENT)
def add_signatory(request: SignatoryRequest, caller: str = Depends(caller_principal)) -> Response:
    """Allow another principal to approve transfers of the caller's identity."""
    _current().add_signatory(caller, request.signatory)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/signatories", response_model=list[str])
def list_signatories(caller: str = Depends(caller_principal)) -> list[str]:
    return _current().signatories(caller)


# --- Approvals and transfers ---


@router.post(
    "/api/approvals",
    response_model=ApprovalResponse,
    status_code=status.HTTP_201_CREATED,
)
def approve_transfer(
    request: ApproveRequest, caller: str = Depends(caller_principal)
) -> ApprovalResponse:
    """Record the caller's approval of a transfer by ``request.owner``."""
    record = _current().approve_transfer(caller, request.owner)
    return ApprovalResponse.from_record(record)


@router.get(
    "/api/approvals/{owner}",
    response_model=ApprovalStatusResponse,
    dependencies=[Depends(caller_principal)],
)
def approval_status(owner: str) -> ApprovalStatusResponse:
    return ApprovalStatusResponse.from_status(_current().approval_status(owner))


@router.post("/api/transfers", response_model=TransferResponse)
def transfer(request: TransferRequest, caller: str = Depends(caller_principal)) -> TransferResponse:
    """Move the caller's identity to ``request.to``."""
    event = _current().transfer(caller, request.to)
    return TransferResponse(
        id=event.id,
        from_principal=event.from_principal,
        to_principal=event.to_principal,
    )


# --- Events ---


@router.get(
    "/api/events",
    response_model=list[EventEntry],
    dependencies=[Depends(caller_principal)],
)
def list_events(since: int = 0) -> list[EventEntry]:
    return [EventEntry.from_pair(seq, event) for seq, event in _current().events(since_seq=since)]
