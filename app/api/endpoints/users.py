from fastapi import APIRouter, Depends

from app.api.dependencies import get_user_service
from app.api.dependencies_auth import get_current_user
from app.db.models import User
from app.schemas.user import ProfileUpdate, UserRead
from app.services.user_service import UserService, to_profile

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)


@router.get("/me", response_model=UserRead)
def current_profile(current_user: User = Depends(get_current_user)):
    return to_profile(current_user)


@router.put("/me", response_model=UserRead)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    return to_profile(user_service.update_profile(current_user, payload))
