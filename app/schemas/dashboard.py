from pydantic import BaseModel


class DashboardStats(BaseModel):
    books_lent: int
    books_borrowed: int
    pending_requests: int
    available_books: int
