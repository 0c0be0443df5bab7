"""
Scheduler admin endpoints.
"""

from dataclasses import asdict, is_dataclass

from fastapi import APIRouter, Depends

from clinicbot.api.dependencies import get_orchestrator
from clinicbot.api.schemas import SchedulerJob, TickResponse
from clinicbot.domains.scheduling.infrastructure.scheduler import NotificationOrchestrator

router = APIRouter()


@router.get("/jobs", response_model=list[SchedulerJob])
async def list_jobs(orchestrator: NotificationOrchestrator = Depends(get_orchestrator)):
    return orchestrator.get_jobs_info()


@router.post("/run", response_model=TickResponse)
async def run_tick(orchestrator: NotificationOrchestrator = Depends(get_orchestrator)):
    """Run all notification passes now; waits if a scheduled tick is in progress."""
    report = await orchestrator.trigger_manual_tick()
    results = {name: asdict(summary) if is_dataclass(summary) else summary for name, summary in report.results.items()}
    return TickResponse(
        ok=report.ok,
        results=results,
        errors=report.errors,
    )
