from typing import Optional

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.core.logging import get_logger
from app.db.models import User, UserRole
from app.db.repositories import UserRepository
from app.schemas.user import ProfileUpdate, UserRead

logger = get_logger("services.users")


def to_profile(user: User) -> UserRead:
    return UserRead.model_validate(user)


class UserService:
    def __init__(self, users: UserRepository):
        self.users = users

    def update_profile(self, caller: User, payload: ProfileUpdate) -> User:
        new_email = payload.email.lower()
        if new_email != caller.email.lower() and self.users.email_exists(new_email):
            raise BadRequestError("Email already in use")

        caller.full_name = payload.full_name
        caller.email = new_email
        caller.location = payload.location
        caller.bio = payload.bio
        caller.profile_picture_url = payload.profile_picture_url
        try:
            user = self.users.save(caller)
        except IntegrityError:
            # email es la única columna única que cambia aquí
            raise BadRequestError("Email already in use")

        logger.info(
            "Profile updated",
            extra={"operation": "profile_update", "resource": "user", "user_id": user.id},
        )
        return user

    def promote_to_admin(self, caller: Optional[User], email_or_username: str) -> User:
        # Bootstrap: si aún no hay admins cualquiera puede promover
        if self.users.admin_exists() and (caller is None or not caller.is_admin):
            raise ForbiddenError("Only administrators can promote users to admin")

        user = self.users.find_by_email_or_username(email_or_username)
        if user is None:
            raise NotFoundError(f"User not found: {email_or_username}")

        user.role = UserRole.ADMIN
        user = self.users.save(user)

        logger.info(
            "User promoted to admin",
            extra={
                "operation": "admin_promote",
                "resource": "user",
                "target_user_id": user.id,
                "promoted_by": caller.id if caller else None,
            },
        )
        return user
