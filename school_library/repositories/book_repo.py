from sqlalchemy import func, or_

from school_library.models.book import Book
from school_library.models.circulation import Circulation
from school_library.models.reservation import Reservation
from school_library.repositories.base import TenantRepo


class BookRepo(TenantRepo):
    model = Book

    def filtered(self, search=None, category=None, author=None, status=None, condition=None, available=False):
        q = self._query()
        if search:
            like = f"%{search}%"
            q = q.filter(or_(Book.title.ilike(like), Book.author.ilike(like)))
        if category:
            q = q.filter(Book.category == category)
        if author:
            q = q.filter(Book.author.ilike(f"%{author}%"))
        if status:
            q = q.filter(Book.status == status)
        if condition:
            q = q.filter(Book.condition == condition)
        if available:
            q = q.filter(Book.available_copies > 0)
        return q.order_by(Book.title.asc())

    def get_by_isbn(self, isbn: str):
        return self._query().filter(Book.isbn == isbn).first()

    def borrowed_counts(self, book_ids):
        if not book_ids:
            return {}
        rows = (
            self._query(Circulation)
            .with_entities(Circulation.book_id, func.count(Circulation.id))
            .filter(Circulation.book_id.in_(book_ids), Circulation.status == Circulation.BORROWED)
            .group_by(Circulation.book_id)
            .all()
        )
        return dict(rows)

    def reservation_counts(self, book_ids):
        if not book_ids:
            return {}
        rows = (
            self._query(Reservation)
            .with_entities(Reservation.book_id, func.count(Reservation.id))
            .filter(Reservation.book_id.in_(book_ids), Reservation.status == Reservation.ACTIVE)
            .group_by(Reservation.book_id)
            .all()
        )
        return dict(rows)

    def count(self) -> int:
        return self._query().count()

    def sum_available(self) -> int:
        return self._query().with_entities(func.coalesce(func.sum(Book.available_copies), 0)).scalar() or 0
