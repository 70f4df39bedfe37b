from sqlalchemy.exc import IntegrityError

from school_library.models.book import Book
from school_library.repositories.base import unit_of_work
from school_library.repositories.book_repo import BookRepo
from school_library.repositories.circulation_repo import CirculationRepo
from school_library.repositories.reservation_repo import ReservationRepo
from school_library.services.base import TenantService
from school_library.utils.errors import BusinessRuleError, ConflictError, NotFoundError, ValidationError

EDITABLE_FIELDS = ("title", "author", "isbn", "barcode", "category", "publisher", "location", "condition", "status")
REQUIRED_FIELDS = ("title", "author", "category", "condition", "status")


def _as_copies(value, field: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
    if number < 0:
        raise ValidationError(f"{field} must be zero or positive")
    return number


class BookService(TenantService):
    def __init__(self, session, tenant_id: int, actor_id: int = None, settings=None):
        super().__init__(session, tenant_id, actor_id, settings)
        self.books = BookRepo(session, tenant_id)
        self.circulations = CirculationRepo(session, tenant_id)
        self.reservations = ReservationRepo(session, tenant_id)

    def list_books(self, **filters):
        return self.books.filtered(**filters)

    def usage_counts(self, books):
        ids = [b.id for b in books]
        return self.books.borrowed_counts(ids), self.books.reservation_counts(ids)

    def get_book(self, book_id) -> Book:
        book = self.books.get(book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book

    def book_activity(self, book: Book):
        """(latest circulations, active reservations in queue order)"""
        return self.circulations.latest_for_book(book.id), self.reservations.active_for_book(book.id)

    def create_book(self, data: dict) -> Book:
        title = (data.get("title") or "").strip()
        author = (data.get("author") or "").strip()
        category = (data.get("category") or "").strip()
        if not title or not author or not category:
            raise ValidationError("Title, author, and category are required")

        total = _as_copies(data.get("totalCopies", 1), "totalCopies")
        available = _as_copies(data.get("availableCopies", total), "availableCopies")
        if available > total:
            raise ValidationError("availableCopies cannot exceed totalCopies")

        isbn = (data.get("isbn") or "").strip() or None

        try:
            with unit_of_work(self.session):
                if isbn and self.books.get_by_isbn(isbn):
                    raise ConflictError("A book with this ISBN already exists")
                book = Book(
                    title=title,
                    author=author,
                    category=category,
                    isbn=isbn,
                    total_copies=total,
                    available_copies=available,
                    created_by=self.actor_id,
                )
                for k in ("barcode", "publisher", "location", "condition", "status"):
                    if data.get(k):
                        setattr(book, k, data[k])
                self.books.add(book)
        except IntegrityError:
            raise ConflictError("A book with this ISBN already exists")

        self.log.info(f"[catalog] tenant={self.tenant_id} created book={book.id} copies={total}")
        return book

    def update_book(self, book_id, data: dict) -> Book:
        try:
            with unit_of_work(self.session):
                book = self.get_book(book_id)

                for k in EDITABLE_FIELDS:
                    if k in data and data[k] is not None:
                        value = str(data[k]).strip()
                        if k in REQUIRED_FIELDS and not value:
                            raise ValidationError(f"{k} cannot be empty")
                        setattr(book, k, value or None)

                if "isbn" in data and book.isbn:
                    other = self.books.get_by_isbn(book.isbn)
                    if other and other.id != book.id:
                        raise ConflictError("A book with this ISBN already exists")

                # the shelf count is always total minus open loans; only issue/return move it
                on_loan = self.circulations.count_borrowed_for_book(book.id)
                total = book.total_copies
                if data.get("totalCopies") is not None:
                    total = _as_copies(data["totalCopies"], "totalCopies")
                    if total < on_loan:
                        raise BusinessRuleError("totalCopies cannot be lower than the copies currently on loan")
                if data.get("availableCopies") is not None:
                    available = _as_copies(data["availableCopies"], "availableCopies")
                    if available != total - on_loan:
                        raise BusinessRuleError(
                            f"availableCopies must equal totalCopies minus copies on loan ({total - on_loan})"
                        )
                book.total_copies = total
                book.available_copies = total - on_loan

                book.updated_by = self.actor_id
        except IntegrityError:
            raise ConflictError("A book with this ISBN already exists")

        return book

    def delete_book(self, book_id) -> None:
        with unit_of_work(self.session):
            book = self.get_book(book_id)
            if self.circulations.count_borrowed_for_book(book.id) > 0:
                raise BusinessRuleError("Cannot delete book with active circulations")
            # returned loans, fines and reservations keep referencing the book
            if self.circulations.count_for_book(book.id) > 0 or self.reservations.count_for_book(book.id) > 0:
                raise BusinessRuleError("Cannot delete book with circulation or reservation history")
            self.books.delete(book)

        self.log.info(f"[catalog] tenant={self.tenant_id} deleted book={book_id}")
