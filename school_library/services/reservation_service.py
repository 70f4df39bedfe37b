from datetime import timedelta

from school_library.models.reservation import Reservation
from school_library.repositories.base import unit_of_work
from school_library.repositories.book_repo import BookRepo
from school_library.repositories.reservation_repo import ReservationRepo
from school_library.repositories.user_repo import UserRepo
from school_library.services.base import TenantService
from school_library.utils.dates import parse_datetime, utcnow
from school_library.utils.errors import BusinessRuleError, ConflictError, NotFoundError, ValidationError


class ReservationService(TenantService):
    def __init__(self, session, tenant_id: int, actor_id: int = None, settings=None):
        super().__init__(session, tenant_id, actor_id, settings)
        self.books = BookRepo(session, tenant_id)
        self.users = UserRepo(session, tenant_id)
        self.reservations = ReservationRepo(session, tenant_id)

    def list_reservations(self, status=None, search=None):
        return self.reservations.filtered(status=status, search=search)

    def create_reservation(self, book_id, user_id, user_type=None, expiry_date=None, notes=None) -> Reservation:
        """
        Queues a user for a book with no copies on the shelf. Books with
        copies available must be issued directly instead.
        """
        if not book_id or not user_id:
            raise ValidationError("Book and user are required")
        expiry = parse_datetime(expiry_date, "expiryDate")

        with unit_of_work(self.session):
            book = self.books.get(book_id, for_update=True)
            if not book:
                raise NotFoundError("Book not found")
            if book.available_copies > 0:
                raise BusinessRuleError("Book is available for immediate borrowing")

            if not self.users.get(user_id):
                raise NotFoundError("User not found")

            if self.reservations.find_active(book_id, user_id):
                raise ConflictError("User already has an active reservation for this book")

            now = utcnow()
            reservation = self.reservations.add(Reservation(
                book_id=book_id,
                user_id=user_id,
                user_type=user_type or "STUDENT",
                reservation_date=now,
                expiry_date=expiry or now + timedelta(days=int(self.settings["LIBRARY_RESERVATION_DAYS"])),
                priority=self.reservations.max_active_priority(book_id) + 1,
                status=Reservation.ACTIVE,
                notes=notes,
            ))

        self.log.info(
            f"[reservation] tenant={self.tenant_id} user={user_id} reserved book={book_id} "
            f"priority={reservation.priority}"
        )
        return reservation

    def cancel_reservation(self, reservation_id, reason=None) -> Reservation:
        with unit_of_work(self.session):
            reservation = self.reservations.get_active(reservation_id)
            if not reservation:
                raise NotFoundError("Active reservation not found")
            reservation.status = Reservation.CANCELLED
            if reason:
                reservation.notes = reason

        self.log.info(f"[reservation] tenant={self.tenant_id} cancelled reservation={reservation.id}")
        return reservation
