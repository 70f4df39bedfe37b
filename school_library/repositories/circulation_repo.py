from datetime import datetime

from sqlalchemy import func, or_

from school_library.models.book import Book
from school_library.models.circulation import Circulation
from school_library.models.user import User
from school_library.repositories.base import TenantRepo


class CirculationRepo(TenantRepo):
    model = Circulation

    def get_borrowed(self, circulation_id: int):
        return (
            self._query()
            .filter(Circulation.id == circulation_id, Circulation.status == Circulation.BORROWED)
            .first()
        )

    def find_active(self, book_id: int, user_id: int):
        return (
            self._query()
            .filter(
                Circulation.book_id == book_id,
                Circulation.user_id == user_id,
                Circulation.status == Circulation.BORROWED,
            )
            .first()
        )

    def count_borrowed_for_book(self, book_id: int) -> int:
        return (
            self._query()
            .filter(Circulation.book_id == book_id, Circulation.status == Circulation.BORROWED)
            .count()
        )

    def count_for_book(self, book_id: int) -> int:
        return self._query().filter(Circulation.book_id == book_id).count()

    def list_borrowed(self, search=None):
        q = self._query().filter(Circulation.status == Circulation.BORROWED)
        if search:
            like = f"%{search}%"
            q = (
                q.join(Book, Circulation.book_id == Book.id)
                .join(User, Circulation.user_id == User.id)
                .filter(or_(Book.title.ilike(like), User.first_name.ilike(like), User.last_name.ilike(like)))
            )
        return q.order_by(Circulation.borrow_date.desc(), Circulation.id.desc())

    def latest_for_book(self, book_id: int, limit: int = 10):
        return (
            self._query()
            .filter(Circulation.book_id == book_id)
            .order_by(Circulation.borrow_date.desc(), Circulation.id.desc())
            .limit(limit)
            .all()
        )

    def count_borrowed(self) -> int:
        return self._query().filter(Circulation.status == Circulation.BORROWED).count()

    def count_overdue(self, now: datetime) -> int:
        return self.find_overdue(now).count()

    def find_overdue(self, now: datetime):
        return self._query().filter(
            Circulation.status == Circulation.BORROWED,
            Circulation.due_date < now,
        )

    def find_due_between(self, start: datetime, end: datetime):
        return self._query().filter(
            Circulation.status == Circulation.BORROWED,
            Circulation.due_date >= start,
            Circulation.due_date <= end,
        )

    def popular_books(self, limit: int = 5):
        """[(book_id, borrow_count)] most borrowed first."""
        borrow_count = func.count(Circulation.id)
        return (
            self._query()
            .with_entities(Circulation.book_id, borrow_count)
            .group_by(Circulation.book_id)
            .order_by(borrow_count.desc(), Circulation.book_id.asc())
            .limit(limit)
            .all()
        )
