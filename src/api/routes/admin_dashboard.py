"""
Admin Dashboard Routes

Console overview, activity chart data and a storage health check.
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from src.api.guards import AdminContext
from src.api.utils.admin_auth import admin_access
from src.api.utils.dispatch import envelope, respond
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.dashboard import DashboardUseCase
from src.depends import get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin Dashboard"])


@router.get("/dashboard/stats")
async def dashboard_stats(
    admin: AdminContext = Depends(admin_access("dashboard.stats")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Console overview

    Users by status, role distribution, security counters, active sessions,
    audit activity of the last 7 days and the most frequent actions of the
    last 30 days.
    """
    return respond(await DashboardUseCase(uow).stats())


@router.get("/dashboard/activity-chart")
async def activity_chart(
    days: int = Query(30, ge=1, le=365),
    admin: AdminContext = Depends(admin_access("dashboard.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return respond(await DashboardUseCase(uow).activity_chart(days))


@router.get("/system/health")
async def system_health(
    admin: AdminContext = Depends(admin_access("dashboard.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """503 with success=false when the database does not answer"""
    result = await DashboardUseCase(uow).system_health()
    data = result.value
    if data["health"]["database"]:
        return envelope(data)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"success": False, "data": data},
    )
