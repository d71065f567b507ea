from datetime import date, timedelta
from typing import List, NoReturn, Optional

from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.core.logging import get_logger
from app.db.models import Book, BookStatus, User
from app.db.repositories import BookRepository
from app.schemas.book import BookCreate, BookUpdate

logger = get_logger("services.lending")

CONCURRENT_CHANGE = "Book was changed by another request, please retry"


def parse_status(value: Optional[str]) -> Optional[BookStatus]:
    """Convierte el query param `status` (sin distinguir mayúsculas) en BookStatus."""
    if value is None or not value.strip():
        return None
    try:
        return BookStatus(value.strip().upper())
    except ValueError:
        raise BadRequestError(f"Unknown status: {value}")


class LendingService:
    """
    Máquina de estados del préstamo de un libro:

        AVAILABLE --request--> PENDING --approve--> ON_LOAN
        PENDING --decline--> AVAILABLE
        ON_LOAN --return--> AVAILABLE

    Cada transición lee la fila con bloqueo, valida estado y permisos del
    caller, escribe y hace commit. Si una validación falla se hace rollback.
    """

    def __init__(self, books: BookRepository):
        self.books = books

    # ---- Consultas ----

    def list_public(self, status: Optional[str] = None, q: Optional[str] = None) -> List[Book]:
        resolved_status = parse_status(status)
        term = q.strip() if q and q.strip() else None
        return self.books.search(resolved_status, term)

    def list_mine(self, caller: User) -> List[Book]:
        return self.books.list_by_owner(caller.id)

    def get(self, book_id: int) -> Book:
        book = self.books.get(book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    # ---- Alta / edición / baja ----

    def create(self, caller: User, payload: BookCreate) -> Book:
        if not caller.is_admin:
            raise ForbiddenError("Only administrators may add books")

        book = Book(
            title=payload.title,
            author=payload.author,
            isbn=payload.isbn or None,
            image_url=payload.image_url,
            owner_id=caller.id,
            status=BookStatus.AVAILABLE,
            date_added=date.today(),
        )
        book = self.books.add(book)

        logger.info(
            "Book created",
            extra={
                "operation": "book_create",
                "resource": "book",
                "book_id": book.id,
                "owner_id": caller.id,
            },
        )
        return book

    def update(self, caller: User, book_id: int, payload: BookUpdate) -> Book:
        book = self._managed_book(caller, book_id)

        book.title = payload.title
        book.author = payload.author
        book.isbn = payload.isbn or None
        book.image_url = payload.image_url
        book = self._save(book)

        logger.info(
            "Book updated",
            extra={"operation": "book_update", "resource": "book", "book_id": book.id},
        )
        return book

    def delete(self, caller: User, book_id: int) -> None:
        book = self._managed_book(caller, book_id)

        if book.status == BookStatus.ON_LOAN:
            self._reject(
                "Cannot delete book that is currently on loan. "
                "The book must be returned first."
            )
        if book.status == BookStatus.PENDING:
            self._reject(
                "Cannot delete book with pending requests. "
                "Please approve or decline the request first."
            )

        try:
            self.books.delete(book)
        except StaleDataError:
            raise BadRequestError(CONCURRENT_CHANGE)

        logger.info(
            "Book deleted",
            extra={"operation": "book_delete", "resource": "book", "book_id": book_id},
        )

    # ---- Transiciones de estado ----

    def request_borrow(
        self,
        caller: User,
        book_id: int,
        borrower_name: str,
        borrower_email: str,
        return_date: Optional[date] = None,
    ) -> Book:
        book = self._locked_book(book_id)

        if book.status != BookStatus.AVAILABLE:
            self._reject("Book is not available")

        if book.owner.email.lower() == borrower_email.strip().lower():
            self._reject("You already own this book")

        if return_date is not None and return_date < date.today():
            self._reject("Return date cannot be in the past")

        book.status = BookStatus.PENDING
        book.borrower_name = borrower_name
        book.borrower_email = borrower_email.strip().lower()
        book.date_requested = date.today()
        book.date_return = return_date

        return self._commit_transition(book, caller, BookStatus.AVAILABLE, "book_request")

    def approve(self, caller: User, book_id: int, return_date: Optional[date] = None) -> Book:
        book = self._managed_book(caller, book_id, lock=True)

        if book.status != BookStatus.PENDING:
            self._reject("Only pending requests can be approved")

        today = date.today()
        if return_date is not None:
            if return_date < today:
                self._reject("Return date cannot be in the past")
            book.date_return = return_date
        elif book.date_return is not None:
            # Fecha pedida por el prestatario al solicitar
            if book.date_return < today:
                self._reject("Requested return date is in the past. Please set a new return date.")
        else:
            book.date_return = today + timedelta(days=settings.DEFAULT_LOAN_DAYS)

        book.status = BookStatus.ON_LOAN
        book.date_borrowed = today

        return self._commit_transition(book, caller, BookStatus.PENDING, "book_approve")

    def decline(self, caller: User, book_id: int) -> Book:
        book = self._managed_book(caller, book_id, lock=True)

        if book.status != BookStatus.PENDING:
            self._reject("Only pending requests can be declined")

        book.clear_borrower()
        book.status = BookStatus.AVAILABLE

        return self._commit_transition(book, caller, BookStatus.PENDING, "book_decline")

    def return_book(self, caller: User, book_id: int) -> Book:
        book = self._managed_book(caller, book_id, lock=True)

        if book.status != BookStatus.ON_LOAN:
            self._reject("Book is not currently on loan")

        book.clear_borrower()
        book.status = BookStatus.AVAILABLE

        return self._commit_transition(book, caller, BookStatus.ON_LOAN, "book_return")

    def return_borrowed(self, caller: User, book_id: int) -> Book:
        """El propio prestatario devuelve el libro."""
        book = self._locked_book(book_id)

        if book.status != BookStatus.ON_LOAN:
            self._reject("Book is not currently on loan")

        if not self._is_borrower(caller, book):
            self._reject("Only the borrower can return this book", forbidden=True)

        book.clear_borrower()
        book.status = BookStatus.AVAILABLE

        return self._commit_transition(book, caller, BookStatus.ON_LOAN, "book_return_borrowed")

    def update_return_date(self, caller: User, book_id: int, return_date: date) -> Book:
        book = self._locked_book(book_id)

        if book.status != BookStatus.ON_LOAN:
            self._reject("Book is not currently on loan")

        if not self._is_borrower(caller, book):
            self._reject("Only the borrower can update the return date", forbidden=True)

        if return_date < date.today():
            self._reject("Return date cannot be in the past")

        book.date_return = return_date
        return self._commit_transition(book, caller, BookStatus.ON_LOAN, "book_return_date")

    # ---- Helpers ----

    def _locked_book(self, book_id: int) -> Book:
        book = self.books.get_for_update(book_id)
        if book is None:
            self.books.rollback()
            raise NotFoundError("Book not found")
        return book

    def _managed_book(self, caller: User, book_id: int, lock: bool = False) -> Book:
        book = self._locked_book(book_id) if lock else self.books.get(book_id)
        if book is None:
            raise NotFoundError("Book not found")
        if not caller.is_admin and book.owner_id != caller.id:
            self._reject("You do not manage this book", forbidden=True)
        return book

    @staticmethod
    def _is_borrower(caller: User, book: Book) -> bool:
        return (
            book.borrower_email is not None
            and book.borrower_email.lower() == caller.email.lower()
        )

    def _save(self, book: Book) -> Book:
        # Otra petición cambió la fila entre la lectura y el commit
        try:
            return self.books.save(book)
        except StaleDataError:
            raise BadRequestError(CONCURRENT_CHANGE)

    def _reject(self, message: str, forbidden: bool = False) -> NoReturn:
        # Libera el bloqueo de la fila antes de propagar el error
        self.books.rollback()
        if forbidden:
            raise ForbiddenError(message)
        raise BadRequestError(message)

    def _commit_transition(
        self,
        book: Book,
        caller: User,
        old_status: BookStatus,
        operation: str,
    ) -> Book:
        new_status = book.status
        book = self._save(book)

        logger.info(
            "Book status changed",
            extra={
                "operation": operation,
                "resource": "book",
                "book_id": book.id,
                "old_status": old_status.value,
                "new_status": new_status.value,
                "user_id": caller.id,
            },
        )
        return book
