# app/api/endpoints/admin.py
from typing import Optional

from fastapi import APIRouter, Depends

from app.api.dependencies import get_user_service
from app.api.dependencies_auth import get_optional_user
from app.db.models import User
from app.schemas.user import PromoteToAdminRequest, UserRead
from app.services.user_service import UserService, to_profile

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
)


@router.post("/promote", response_model=UserRead)
def promote_to_admin(
    payload: PromoteToAdminRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    user_service: UserService = Depends(get_user_service),
):
    """
    Promueve un usuario a ADMIN.

    Sin token solo funciona mientras no exista ningún admin (setup inicial);
    después hace falta el token de un admin.
    """
    user = user_service.promote_to_admin(current_user, payload.email_or_username)
    return to_profile(user)
