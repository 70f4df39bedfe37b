from school_library.models.tenant import Tenant
from school_library.models.user import User
from school_library.models.book import Book
from school_library.models.circulation import Circulation
from school_library.models.reservation import Reservation
from school_library.models.library_user import LibraryUser
from school_library.models.fine import Fine
from school_library.models.notification_log import NotificationLog

__all__ = [
    "Tenant",
    "User",
    "Book",
    "Circulation",
    "Reservation",
    "LibraryUser",
    "Fine",
    "NotificationLog",
]
