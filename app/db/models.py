from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.db.session import Base
from sqlalchemy.sql import func


# ======================
# Enums
# ======================

class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class BookStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    PENDING = "PENDING"
    ON_LOAN = "ON_LOAN"


# ======================
# User
# ======================

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # email y username se guardan siempre en minúsculas
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[UserRole] = mapped_column(SqlEnum(UserRole), nullable=False, default=UserRole.USER)

    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    joined_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    books: Mapped[list["Book"]] = relationship("Book", back_populates="owner")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


# ======================
# Book
# ======================

class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str | None] = mapped_column(String(20), nullable=True)

    status: Mapped[BookStatus] = mapped_column(
        SqlEnum(BookStatus),
        nullable=False,
        default=BookStatus.AVAILABLE,
        index=True,
    )

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Datos del prestatario: solo presentes en PENDING y ON_LOAN
    borrower_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    borrower_email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    date_requested: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_borrowed: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_return: Mapped[date | None] = mapped_column(Date, nullable=True)

    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_added: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    # Control optimista: el UPDATE incluye "WHERE version_id = ?"
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    owner: Mapped["User"] = relationship("User", back_populates="books")

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def owner_name(self) -> str | None:
        return self.owner.full_name if self.owner else None

    def clear_borrower(self) -> None:
        self.borrower_name = None
        self.borrower_email = None
        self.date_requested = None
        self.date_borrowed = None
        self.date_return = None
