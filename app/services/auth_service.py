import re
import time
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import BadRequestError, UnauthorizedError
from app.core.logging import get_logger
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.db.models import User, UserRole
from app.db.repositories import UserRepository

logger = get_logger("services.auth")

DEFAULT_LOCATION = "Philippines"
DEFAULT_BIO = "Welcome to Peer Reads!"
DEFAULT_PROFILE_PICTURE_URL = "https://via.placeholder.com/120/ADD8E6/000000?text=%F0%9F%91%A4"

INVALID_CREDENTIALS = "Invalid username/email or password"


def build_username(email: str) -> str:
    """Parte local del email, solo alfanuméricos y en minúsculas."""
    local_part = email.split("@", 1)[0]
    return re.sub(r"[^A-Za-z0-9]", "", local_part).lower()


def issue_token(user: User) -> str:
    return create_access_token(user_id=user.id, email=user.email, role=user.role.value)


class AuthService:
    def __init__(self, users: UserRepository):
        self.users = users

    def register(self, full_name: str, email: str, password: str) -> tuple[User, str]:
        email = email.strip().lower()
        if self.users.email_exists(email):
            raise BadRequestError("Email is already registered")

        username = build_username(email)
        if not username or self.users.username_exists(username):
            username = f"{username}{int(time.time() * 1000)}"

        # El primer usuario registrado administra la instancia
        role = UserRole.ADMIN if self.users.count() == 0 else UserRole.USER

        user = User(
            full_name=full_name.strip(),
            email=email,
            username=username,
            hashed_password=hash_password(password),
            role=role,
            joined_date=date.today(),
            location=DEFAULT_LOCATION,
            bio=DEFAULT_BIO,
            profile_picture_url=DEFAULT_PROFILE_PICTURE_URL,
        )
        try:
            user = self.users.add(user)
        except IntegrityError:
            # Otro registro ganó la carrera entre la verificación y el INSERT
            if self.users.find_by_email(email) is not None:
                raise BadRequestError("Email is already registered")
            raise BadRequestError("Username is already taken, please try again")

        logger.info(
            "User registered",
            extra={
                "operation": "auth_register",
                "resource": "user",
                "user_id": user.id,
                "role": user.role.value,
            },
        )
        return user, issue_token(user)

    def login(self, username_or_email: str, password: str) -> tuple[User, str]:
        user = self.users.find_by_email_or_username(username_or_email)

        # Mismo error si no existe el usuario o si la contraseña no coincide
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning(
                "login_failed",
                extra={
                    "operation": "auth_login",
                    "resource": "user",
                    "login": username_or_email,
                    "status_code": 401,
                },
            )
            raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.info(
            "login_success",
            extra={
                "operation": "auth_login",
                "resource": "user",
                "user_id": user.id,
                "status_code": 200,
            },
        )
        return user, issue_token(user)

    def resolve_caller(self, token: Optional[str]) -> Optional[User]:
        """
        Devuelve el usuario dueño del token, o None si el token falta,
        tiene firma inválida, expiró o apunta a un usuario inexistente.
        """
        if not token:
            return None

        payload = decode_access_token(token)
        if payload is None:
            return None

        return self.users.get(payload["user_id"])
