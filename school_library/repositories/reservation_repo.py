from sqlalchemy import func, or_

from school_library.models.book import Book
from school_library.models.reservation import Reservation
from school_library.models.user import User
from school_library.repositories.base import TenantRepo


class ReservationRepo(TenantRepo):
    model = Reservation

    def get_active(self, reservation_id: int):
        return (
            self._query()
            .filter(Reservation.id == reservation_id, Reservation.status == Reservation.ACTIVE)
            .first()
        )

    def find_active(self, book_id: int, user_id: int):
        return (
            self._query()
            .filter(
                Reservation.book_id == book_id,
                Reservation.user_id == user_id,
                Reservation.status == Reservation.ACTIVE,
            )
            .first()
        )

    def count_active_for_book(self, book_id: int) -> int:
        return (
            self._query()
            .filter(Reservation.book_id == book_id, Reservation.status == Reservation.ACTIVE)
            .count()
        )

    def count_for_book(self, book_id: int) -> int:
        return self._query().filter(Reservation.book_id == book_id).count()

    def max_active_priority(self, book_id: int) -> int:
        value = (
            self._query()
            .with_entities(func.max(Reservation.priority))
            .filter(Reservation.book_id == book_id, Reservation.status == Reservation.ACTIVE)
            .scalar()
        )
        return value or 0

    def active_for_book(self, book_id: int):
        return (
            self._query()
            .filter(Reservation.book_id == book_id, Reservation.status == Reservation.ACTIVE)
            .order_by(Reservation.priority.asc(), Reservation.id.asc())
            .all()
        )

    def filtered(self, status=None, search=None):
        q = self._query()
        if status:
            q = q.filter(Reservation.status == status)
        if search:
            like = f"%{search}%"
            q = (
                q.join(Book, Reservation.book_id == Book.id)
                .join(User, Reservation.user_id == User.id)
                .filter(or_(Book.title.ilike(like), User.first_name.ilike(like), User.last_name.ilike(like)))
            )
        return q.order_by(Reservation.reservation_date.desc(), Reservation.id.desc())

    def count_active(self) -> int:
        return self._query().filter(Reservation.status == Reservation.ACTIVE).count()
