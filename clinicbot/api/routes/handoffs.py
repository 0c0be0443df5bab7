"""
Handoff admin endpoints: list open sessions, resolve, hot-path membership check.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from clinicbot.api.dependencies import get_handoff_registry
from clinicbot.api.schemas import HandoffCheckResponse, HandoffSessionResponse, ResolveHandoffRequest
from clinicbot.domains.scheduling.infrastructure.handoff import HandoffRegistry

router = APIRouter()


@router.get("", response_model=list[HandoffSessionResponse])
async def list_open_handoffs(registry: HandoffRegistry = Depends(get_handoff_registry)):
    """Waiting and active sessions, newest first."""
    sessions = await registry.list_open_sessions()
    return [
        HandoffSessionResponse(
            id=s.id,
            patient_phone=s.patient_phone,
            patient_name=s.patient_name,
            reason=s.reason,
            status=s.status.value,
            instance_name=s.instance_name,
            created_at=s.created_at,
            last_message_at=s.last_message_at,
        )
        for s in sessions
    ]


@router.post("/{session_id}/resolve")
async def resolve_handoff(
    session_id: str,
    body: ResolveHandoffRequest,
    registry: HandoffRegistry = Depends(get_handoff_registry),
):
    resolved = await registry.resolve_by_id(session_id, body.resolved_by)
    if not resolved:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No open handoff session with that id")
    return {"success": True, "session_id": session_id, "resolved_by": body.resolved_by}


@router.get("/check/{phone}", response_model=HandoffCheckResponse)
async def check_handoff(phone: str, registry: HandoffRegistry = Depends(get_handoff_registry)):
    return HandoffCheckResponse(phone=phone, in_handoff=registry.is_in_handoff(phone))
