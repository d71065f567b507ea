from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.db.models import UserRole


class UserRead(BaseModel):
    id: int
    full_name: str
    username: str
    email: str
    role: UserRole
    location: Optional[str] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    joined_date: date

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    location: Optional[str] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None


class PromoteToAdminRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email_or_username: str = Field(min_length=1)
