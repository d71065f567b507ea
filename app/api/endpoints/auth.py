from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_auth_service
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from app.services.auth_service import AuthService
from app.services.user_service import to_profile

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    user, token = auth_service.register(
        full_name=payload.full_name,
        email=payload.email,
        password=payload.password,
    )
    return AuthResponse(token=token, user=to_profile(user))


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    user, token = auth_service.login(payload.username_or_email, payload.password)
    return AuthResponse(token=token, user=to_profile(user))
