from app.db.models import BookStatus, User
from app.db.repositories import BookRepository
from app.schemas.dashboard import DashboardStats


class DashboardService:
    def __init__(self, books: BookRepository):
        self.books = books

    def stats(self, caller: User) -> DashboardStats:
        return DashboardStats(
            books_lent=self.books.count_by_owner_and_status(caller.id, BookStatus.ON_LOAN),
            books_borrowed=self.books.count_by_borrower_and_status(caller.email, BookStatus.ON_LOAN),
            pending_requests=self.books.count_by_owner_and_status(caller.id, BookStatus.PENDING),
            available_books=self.books.count_by_status(BookStatus.AVAILABLE),
        )
