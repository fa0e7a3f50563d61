"""Maintenance API routes -- on-demand purge runs."""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])


class MaintenanceRequest(BaseModel):
    powerless: bool = True
    inactive: bool = True


class MaintenanceResponse(BaseModel):
    started_at: str
    powerless_removed: int
    inactive_removed: int
    total_removed: int


_maintenance = None


def init_maintenance_routes(maintenance_service):
    global _maintenance
    _maintenance = maintenance_service


@router.post("/run", response_model=MaintenanceResponse)
def api_run_maintenance(req: MaintenanceRequest):
    if not (req.powerless or req.inactive):
        raise HTTPException(status_code=400, detail="Nothing to run.")
    return _maintenance.run(powerless=req.powerless, inactive=req.inactive)
