from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from app.db.models import Book, BookStatus, User, UserRole


def commit_or_rollback(db: Session) -> None:
    """
    Commit de la transacción actual. Si falla por una restricción única o
    por una versión desactualizada se hace rollback y se propaga el error
    para que el servicio lo traduzca.
    """
    try:
        db.commit()
    except (IntegrityError, StaleDataError):
        db.rollback()
        raise


class UserRepository:
    """Acceso a la tabla users. Las búsquedas por email/username ignoran mayúsculas."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def count(self) -> int:
        return self.db.query(func.count(User.id)).scalar() or 0

    def find_by_email(self, email: str) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def find_by_username(self, username: str) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(func.lower(User.username) == username.strip().lower())
            .first()
        )

    def find_by_email_or_username(self, value: str) -> Optional[User]:
        return self.find_by_email(value) or self.find_by_username(value)

    def email_exists(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def username_exists(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def admin_exists(self) -> bool:
        return (
            self.db.query(User.id).filter(User.role == UserRole.ADMIN).first()
            is not None
        )

    def add(self, user: User) -> User:
        self.db.add(user)
        commit_or_rollback(self.db)
        self.db.refresh(user)
        return user

    def save(self, user: User) -> User:
        commit_or_rollback(self.db)
        self.db.refresh(user)
        return user


class BookRepository:
    """Acceso a la tabla books, incluidos los conteos del dashboard."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, book_id: int) -> Optional[Book]:
        return self.db.query(Book).filter(Book.id == book_id).first()

    def get_for_update(self, book_id: int) -> Optional[Book]:
        # SELECT ... FOR UPDATE: bloquea la fila hasta el commit.
        # SQLite lo ignora; ahí la columna version_id rechaza la segunda escritura
        return (
            self.db.query(Book)
            .filter(Book.id == book_id)
            .with_for_update()
            .first()
        )

    def search(self, status: Optional[BookStatus], term: Optional[str]) -> List[Book]:
        query = self.db.query(Book).join(Book.owner).options(joinedload(Book.owner))

        if status is not None:
            query = query.filter(Book.status == status)

        if term:
            pattern = f"%{term}%"
            query = query.filter(
                or_(
                    Book.title.ilike(pattern),
                    Book.author.ilike(pattern),
                    Book.isbn.ilike(pattern),
                    User.full_name.ilike(pattern),
                )
            )

        return query.order_by(Book.id).all()

    def list_by_owner(self, owner_id: int) -> List[Book]:
        return (
            self.db.query(Book)
            .filter(Book.owner_id == owner_id)
            .order_by(Book.id)
            .all()
        )

    def count_by_status(self, status: BookStatus) -> int:
        return (
            self.db.query(func.count(Book.id))
            .filter(Book.status == status)
            .scalar()
            or 0
        )

    def count_by_owner_and_status(self, owner_id: int, status: BookStatus) -> int:
        return (
            self.db.query(func.count(Book.id))
            .filter(Book.owner_id == owner_id, Book.status == status)
            .scalar()
            or 0
        )

    def count_by_borrower_and_status(self, borrower_email: str, status: BookStatus) -> int:
        return (
            self.db.query(func.count(Book.id))
            .filter(
                func.lower(Book.borrower_email) == borrower_email.lower(),
                Book.status == status,
            )
            .scalar()
            or 0
        )

    def add(self, book: Book) -> Book:
        self.db.add(book)
        commit_or_rollback(self.db)
        self.db.refresh(book)
        return book

    def save(self, book: Book) -> Book:
        commit_or_rollback(self.db)
        self.db.refresh(book)
        return book

    def delete(self, book: Book) -> None:
        self.db.delete(book)
        commit_or_rollback(self.db)

    def rollback(self) -> None:
        self.db.rollback()
