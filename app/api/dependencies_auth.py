from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.api.dependencies import get_auth_service
from app.core.logging import user_id_ctx
from app.db.models import User
from app.services.auth_service import AuthService


# auto_error=False: la falta de token se responde igual que un token inválido
bearer_scheme = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    """
    Usuario del token Bearer, o None si no hay token o no es válido.
    """
    token = credentials.credentials if credentials else None
    user = auth_service.resolve_caller(token)

    if user is not None:
        # Guardar user_id para LOGGING estructurado
        user_id_ctx.set(str(user.id))

    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """
    Obtiene el usuario actual a partir del token JWT.
    Lanza 401 si no se puede validar, sin detallar el motivo.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
