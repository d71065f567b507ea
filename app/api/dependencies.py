from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.repositories import BookRepository, UserRepository
from app.db.session import SessionLocal
from app.services.auth_service import AuthService
from app.services.dashboard_service import DashboardService
from app.services.lending_service import LendingService
from app.services.user_service import UserService


def get_db() -> Generator[Session, None, None]:
    """
    Dependencia para obtener una sesión de base de datos por request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_book_repository(db: Session = Depends(get_db)) -> BookRepository:
    return BookRepository(db)


def get_auth_service(users: UserRepository = Depends(get_user_repository)) -> AuthService:
    return AuthService(users)


def get_user_service(users: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(users)


def get_lending_service(books: BookRepository = Depends(get_book_repository)) -> LendingService:
    return LendingService(books)


def get_dashboard_service(books: BookRepository = Depends(get_book_repository)) -> DashboardService:
    return DashboardService(books)
