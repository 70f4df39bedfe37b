from datetime import timedelta
from decimal import Decimal

from school_library.models.circulation import Circulation
from school_library.models.fine import Fine
from school_library.models.reservation import Reservation
from school_library.repositories.base import unit_of_work
from school_library.repositories.book_repo import BookRepo
from school_library.repositories.circulation_repo import CirculationRepo
from school_library.repositories.fine_repo import FineRepo
from school_library.repositories.library_user_repo import LibraryUserRepo
from school_library.repositories.reservation_repo import ReservationRepo
from school_library.repositories.user_repo import UserRepo
from school_library.services.base import TenantService, parse_amount
from school_library.utils.dates import overdue_days, parse_datetime, utcnow
from school_library.utils.errors import BusinessRuleError, ConflictError, NotFoundError, ValidationError


class CirculationService(TenantService):
    """
    Issue / return / renew. Each operation reads, validates and writes inside
    one unit of work, so a failed precondition leaves every row untouched.
    """

    def __init__(self, session, tenant_id: int, actor_id: int = None, settings=None):
        super().__init__(session, tenant_id, actor_id, settings)
        self.books = BookRepo(session, tenant_id)
        self.users = UserRepo(session, tenant_id)
        self.circulations = CirculationRepo(session, tenant_id)
        self.reservations = ReservationRepo(session, tenant_id)
        self.library_users = LibraryUserRepo(session, tenant_id)
        self.fines = FineRepo(session, tenant_id)

    def list_borrowed(self, search=None):
        return self.circulations.list_borrowed(search)

    def issue_book(self, book_id, user_id, user_type=None, due_date=None, notes=None) -> Circulation:
        if not book_id or not user_id:
            raise ValidationError("Book and user are required")
        due = parse_datetime(due_date, "dueDate")
        user_type = user_type or "STUDENT"

        with unit_of_work(self.session):
            book = self.books.get(book_id, for_update=True)
            if not book:
                raise NotFoundError("Book not found")
            if book.available_copies is None or book.available_copies <= 0:
                raise BusinessRuleError("Book not available")

            if not self.users.get(user_id):
                raise NotFoundError("User not found")

            if self.circulations.find_active(book_id, user_id):
                raise ConflictError("User already has an active loan for this book")

            now = utcnow()
            circulation = self.circulations.add(Circulation(
                book_id=book_id,
                user_id=user_id,
                user_type=user_type,
                borrow_date=now,
                due_date=due or now + timedelta(days=int(self.settings["LIBRARY_LOAN_DAYS"])),
                renewal_count=0,
                max_renewals=int(self.settings["LIBRARY_MAX_RENEWALS"]),
                status=Circulation.BORROWED,
                fine_amount=Decimal("0.00"),
                issued_by=self.actor_id,
                notes=notes,
            ))

            book.available_copies -= 1
            self.library_users.upsert_for_issue(user_id, user_type)

            # local rule: a loan to a queued user closes that user's reservation.
            # Returns never advance the queue.
            reservation = self.reservations.find_active(book_id, user_id)
            if reservation:
                reservation.status = Reservation.FULFILLED

        self.log.info(
            f"[circulation] tenant={self.tenant_id} issued book={book_id} to user={user_id} "
            f"circulation={circulation.id} due={circulation.due_date.isoformat()}"
        )
        return circulation

    def _computed_fine(self, circulation: Circulation, now) -> Decimal:
        rate = Decimal(str(self.settings.get("LIBRARY_FINE_PER_DAY") or "0"))
        if rate <= 0:
            return Decimal("0.00")
        days = overdue_days(circulation.due_date, now)
        return (rate * Decimal(days)).quantize(Decimal("0.01"))

    def return_book(self, circulation_id, condition=None, notes=None, fine_amount=None) -> Circulation:
        amount = parse_amount(fine_amount)

        with unit_of_work(self.session):
            circulation = self.circulations.get_borrowed(circulation_id)
            if not circulation:
                raise NotFoundError("Circulation record not found")

            now = utcnow()
            if amount is None:
                amount = self._computed_fine(circulation, now)

            circulation.return_date = now
            circulation.status = Circulation.RETURNED
            circulation.returned_by = self.actor_id
            circulation.fine_amount = amount
            if notes:
                circulation.notes = notes

            book = self.books.get(circulation.book_id, for_update=True)
            if book:
                book.available_copies = min(book.total_copies, book.available_copies + 1)
                if condition:
                    book.condition = condition
                book.updated_by = self.actor_id

            self.library_users.release_for_return(circulation.user_id)

            if amount > 0:
                self.fines.add(Fine(
                    circulation_id=circulation.id,
                    user_id=circulation.user_id,
                    amount=amount,
                    fine_type=Fine.OVERDUE if circulation.due_date < now else Fine.OTHER,
                    status=Fine.UNPAID,
                ))

        self.log.info(
            f"[circulation] tenant={self.tenant_id} returned circulation={circulation.id} "
            f"fine={amount}"
        )
        return circulation

    def renew_book(self, circulation_id, new_due_date=None, notes=None) -> Circulation:
        requested = parse_datetime(new_due_date, "newDueDate")

        with unit_of_work(self.session):
            circulation = self.circulations.get_borrowed(circulation_id)
            if not circulation:
                raise NotFoundError("Circulation record not found")

            if circulation.renewal_count >= circulation.max_renewals:
                raise BusinessRuleError("Maximum renewals exceeded")

            if self.reservations.count_active_for_book(circulation.book_id) > 0:
                raise BusinessRuleError("Book has active reservations and cannot be renewed")

            due = requested or circulation.due_date + timedelta(days=int(self.settings["LIBRARY_RENEWAL_DAYS"]))
            if due <= circulation.due_date:
                raise ValidationError("newDueDate must be after the current due date")

            circulation.due_date = due
            circulation.renewal_count += 1
            if notes:
                circulation.notes = notes

        self.log.info(
            f"[circulation] tenant={self.tenant_id} renewed circulation={circulation.id} "
            f"renewals={circulation.renewal_count}/{circulation.max_renewals}"
        )
        return circulation
