from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from app.api.dependencies import get_lending_service
from app.api.dependencies_auth import get_current_user
from app.db.models import User
from app.schemas.book import (
    ApproveRequest,
    BookCreate,
    BookRead,
    BookUpdate,
    BorrowRequest,
    ReturnDateUpdate,
)
from app.services.lending_service import LendingService

router = APIRouter(
    prefix="/api/books",
    tags=["books"],
)


@router.get("", response_model=List[BookRead])
def list_books(
    status_filter: Optional[str] = Query(None, alias="status"),
    q: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.list_public(status_filter, q)


# importante: debe ir antes de /{book_id}
@router.get("/mine", response_model=List[BookRead])
def my_books(
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.list_mine(current_user)


@router.get("/{book_id}", response_model=BookRead)
def get_book(
    book_id: int,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.get(book_id)


@router.post("", response_model=BookRead, status_code=status.HTTP_201_CREATED)
def create_book(
    payload: BookCreate,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.create(current_user, payload)


@router.put("/{book_id}", response_model=BookRead)
def update_book(
    book_id: int,
    payload: BookUpdate,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.update(current_user, book_id, payload)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: int,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    lending.delete(current_user, book_id)
    return None


# ---- Transiciones del préstamo ----

@router.post("/{book_id}/request", response_model=BookRead)
def request_borrow(
    book_id: int,
    payload: BorrowRequest,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.request_borrow(
        current_user,
        book_id,
        borrower_name=payload.borrower_name,
        borrower_email=payload.borrower_email,
        return_date=payload.return_date,
    )


@router.post("/{book_id}/approve", response_model=BookRead)
def approve_request(
    book_id: int,
    payload: Optional[ApproveRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return_date = payload.return_date if payload else None
    return lending.approve(current_user, book_id, return_date)


@router.post("/{book_id}/decline", response_model=BookRead)
def decline_request(
    book_id: int,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.decline(current_user, book_id)


@router.post("/{book_id}/return", response_model=BookRead)
def return_book(
    book_id: int,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.return_book(current_user, book_id)


@router.post("/{book_id}/return-borrowed", response_model=BookRead)
def return_borrowed_book(
    book_id: int,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.return_borrowed(current_user, book_id)


@router.put("/{book_id}/return-date", response_model=BookRead)
def update_return_date(
    book_id: int,
    payload: ReturnDateUpdate,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
):
    return lending.update_return_date(current_user, book_id, payload.return_date)
