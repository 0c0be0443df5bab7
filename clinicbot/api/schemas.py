"""Request and response models for the admin routes."""

from datetime import datetime

from pydantic import BaseModel, Field


class ResolveHandoffRequest(BaseModel):
    resolved_by: str = Field(..., min_length=1, description="Attendant id or name closing the session")


class HandoffSessionResponse(BaseModel):
    id: str | None
    patient_phone: str
    patient_name: str | None = None
    reason: str | None = None
    status: str
    instance_name: str
    created_at: datetime | None = None
    last_message_at: datetime | None = None


class HandoffCheckResponse(BaseModel):
    phone: str
    in_handoff: bool


class SchedulerJob(BaseModel):
    id: str
    name: str
    next_run: str | None = None


class TickResponse(BaseModel):
    ok: bool
    results: dict
    errors: dict[str, str]
