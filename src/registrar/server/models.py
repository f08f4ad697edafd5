"""Pydantic models for registry API requests and responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from registrar.approvals import ApprovalRecord
from registrar.events import RegistryEvent, event_to_dict
from registrar.transfer import ApprovalStatus


class PersonRecord(BaseModel):
    """Identity payload: a person's name and birthdate (epoch seconds)."""

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    birthdate: int


class RegisterResponse(BaseModel):
    """POST /api/identities response body."""

    id: int


class ViewerRequest(BaseModel):
    """POST /api/viewers request body."""

    viewer: str = Field(min_length=1)


class SignatoryRequest(BaseModel):
    """POST /api/signatories request body."""

    signatory: str = Field(min_length=1)


class ApproveRequest(BaseModel):
    """POST /api/approvals request body."""

    owner: str = Field(min_length=1)


class ApprovalResponse(BaseModel):
    signatory: str
    approved_at: int

    @classmethod
    def from_record(cls, record: ApprovalRecord) -> ApprovalResponse:
        return cls(signatory=record.signatory, approved_at=record.approved_at)


class ApprovalStatusResponse(BaseModel):
    """GET /api/approvals/{owner} response body."""

    owner: str
    valid_approvals: int
    required: int
    approved: bool

    @classmethod
    def from_status(cls, status: ApprovalStatus) -> ApprovalStatusResponse:
        return cls(
            owner=status.owner,
            valid_approvals=status.valid_approvals,
            required=status.required,
            approved=status.approved,
        )


class TransferRequest(BaseModel):
    """POST /api/transfers request body."""

    to: str = Field(min_length=1)


class TransferResponse(BaseModel):
    id: int
    from_principal: str
    to_principal: str


class EventEntry(BaseModel):
    seq: int
    event: dict[str, Any]

    @classmethod
    def from_pair(cls, seq: int, event: RegistryEvent) -> EventEntry:
        return cls(seq=seq, event=event_to_dict(event))


class ErrorResponse(BaseModel):
    """Body returned for every rejected operation."""

    code: str
    message: str


class HealthResponse(BaseModel):
    """GET /api/health response."""

    status: str = "ok"
    version: str = "0.1.0"
