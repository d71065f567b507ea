from datetime import date

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.core.security import hash_password
from app.db.models import Book, BookStatus, User, UserRole
from app.db.repositories import BookRepository, UserRepository

logger = get_logger("services.seed")

DEMO_ADMIN_EMAIL = "admin@peerreads.local"
DEMO_ADMIN_PASSWORD = "admin123"  # cámbialo luego

STARTER_BOOKS = [
    {
        "title": "Atomic Habits",
        "author": "James Clear",
        "isbn": "9780735211292",
        "image_url": "https://covers.openlibrary.org/b/id/10523342-L.jpg",
    },
    {
        "title": "Deep Work",
        "author": "Cal Newport",
        "isbn": "9781455586691",
        "image_url": "https://covers.openlibrary.org/b/id/8231856-L.jpg",
    },
]


def seed_demo_data(db: Session) -> bool:
    """Crea el admin de demo y los libros iniciales si la base está vacía."""
    users = UserRepository(db)
    if users.count() > 0:
        return False

    admin = users.add(
        User(
            full_name="Peer Reads Admin",
            email=DEMO_ADMIN_EMAIL,
            username="admin",
            hashed_password=hash_password(DEMO_ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            location="Philippines",
            bio="System administrator",
            profile_picture_url="https://via.placeholder.com/120/222/ffffff?text=PR",
            joined_date=date.today(),
        )
    )

    books = BookRepository(db)
    for data in STARTER_BOOKS:
        books.add(
            Book(
                **data,
                status=BookStatus.AVAILABLE,
                owner_id=admin.id,
                date_added=date.today(),
            )
        )

    logger.info(
        "Demo data seeded",
        extra={"operation": "seed", "resource": "book", "books": len(STARTER_BOOKS)},
    )
    return True
