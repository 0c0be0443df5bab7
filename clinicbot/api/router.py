from fastapi import APIRouter

from clinicbot.api.routes import handoffs, scheduler

api_router = APIRouter()

api_router.include_router(handoffs.router, prefix="/handoffs", tags=["handoffs"])
api_router.include_router(scheduler.router, prefix="/scheduler", tags=["scheduler"])
