from school_library.repositories.book_repo import BookRepo
from school_library.repositories.circulation_repo import CirculationRepo
from school_library.repositories.fine_repo import FineRepo
from school_library.repositories.library_user_repo import LibraryUserRepo
from school_library.repositories.reservation_repo import ReservationRepo
from school_library.services.base import TenantService
from school_library.utils.dates import utcnow


class StatsService(TenantService):
    def library_stats(self) -> dict:
        books = BookRepo(self.session, self.tenant_id)
        circulations = CirculationRepo(self.session, self.tenant_id)
        reservations = ReservationRepo(self.session, self.tenant_id)
        library_users = LibraryUserRepo(self.session, self.tenant_id)
        fines = FineRepo(self.session, self.tenant_id)

        now = utcnow()
        unpaid_count, unpaid_amount = fines.unpaid_summary()

        popular = []
        for book_id, borrow_count in circulations.popular_books(limit=5):
            book = books.get(book_id)
            if book:
                popular.append({
                    "id": book.id,
                    "title": book.title,
                    "author": book.author,
                    "borrowCount": borrow_count,
                })

        return {
            "totalBooks": books.count(),
            "availableBooks": int(books.sum_available()),
            "borrowedBooks": circulations.count_borrowed(),
            "overdueBooks": circulations.count_overdue(now),
            "activeReservations": reservations.count_active(),
            "totalLibraryUsers": library_users.count(),
            "unpaidFines": {"count": unpaid_count, "amount": float(unpaid_amount)},
            "popularBooks": popular,
        }
