from fastapi import APIRouter, Depends

from app.api.dependencies import get_dashboard_service
from app.api.dependencies_auth import get_current_user
from app.db.models import User
from app.schemas.dashboard import DashboardStats
from app.services.dashboard_service import DashboardService

router = APIRouter(
    prefix="/api/dashboard",
    tags=["dashboard"],
)


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    current_user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """
    Contadores del usuario actual: libros prestados a otros, libros que
    tiene prestados, solicitudes pendientes y libros disponibles en total.
    """
    return dashboard.stats(current_user)
