from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.db.models import BookStatus


class BookCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    isbn: Optional[str] = Field(None, max_length=20)
    image_url: Optional[str] = None


# PUT reemplaza los mismos campos que el alta
BookUpdate = BookCreate


class BorrowRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    borrower_name: str = Field(min_length=1, max_length=255)
    borrower_email: EmailStr
    return_date: Optional[date] = None


class ApproveRequest(BaseModel):
    return_date: Optional[date] = None


class ReturnDateUpdate(BaseModel):
    return_date: date


class BookRead(BaseModel):
    id: int
    title: str
    author: str
    isbn: Optional[str] = None
    status: BookStatus
    owner_id: int
    owner_name: Optional[str] = None
    borrower_name: Optional[str] = None
    borrower_email: Optional[str] = None
    date_requested: Optional[date] = None
    date_borrowed: Optional[date] = None
    date_return: Optional[date] = None
    date_added: date
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
