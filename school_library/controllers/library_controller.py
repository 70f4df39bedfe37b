from flask import Blueprint, g, jsonify, request

from school_library.extensions import db
from school_library.services.book_service import BookService
from school_library.services.circulation_service import CirculationService
from school_library.services.fine_service import FineService
from school_library.services.notification_service import NotificationService
from school_library.services.reservation_service import ReservationService
from school_library.services.stats_service import StatsService
from school_library.services.user_service import UserService
from school_library.repositories.base import paginate
from school_library.utils.decorators import permission_required, tenant_required
from school_library.utils.errors import ValidationError
from school_library.utils.permissions import (
    LIBRARY_CREATE,
    LIBRARY_DELETE,
    LIBRARY_MANAGE,
    LIBRARY_READ,
    LIBRARY_UPDATE,
)

library_bp = Blueprint("library", __name__)

MAX_PAGE_SIZE = 100


@library_bp.before_request
@tenant_required
def _authenticate():
    return None


# -----------------------------
# Helpers
# -----------------------------
def _service(cls):
    return cls(db.session, g.tenant_id, actor_id=g.current_user.id)


def _body() -> dict:
    return request.get_json(silent=True) or {}


def _as_id(value, field: str):
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer id")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer id")


def _page_args():
    try:
        page = int(request.args.get("page", 1))
        limit = int(request.args.get("limit", 10))
    except ValueError:
        raise ValidationError("page and limit must be integers")
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")
    return page, min(limit, MAX_PAGE_SIZE)


def _iso(dt):
    return dt.isoformat() if dt else None


def _user_json(u):
    if not u:
        return None
    return {"id": u.id, "name": u.full_name, "email": u.email}


def _book_json(b, borrowed=None, reserved=None):
    data = {
        "id": b.id,
        "isbn": b.isbn,
        "barcode": b.barcode,
        "title": b.title,
        "author": b.author,
        "category": b.category,
        "publisher": b.publisher,
        "location": b.location,
        "totalCopies": b.total_copies,
        "availableCopies": b.available_copies,
        "condition": b.condition,
        "status": b.status,
        "createdAt": _iso(b.created_at),
        "updatedAt": _iso(b.updated_at),
    }
    if borrowed is not None:
        data["currentBorrowed"] = borrowed
    if reserved is not None:
        data["activeReservations"] = reserved
    return data


def _circulation_json(c):
    return {
        "id": c.id,
        "bookId": c.book_id,
        "userId": c.user_id,
        "userType": c.user_type,
        "borrowDate": _iso(c.borrow_date),
        "dueDate": _iso(c.due_date),
        "returnDate": _iso(c.return_date),
        "renewalCount": c.renewal_count,
        "maxRenewals": c.max_renewals,
        "status": c.status,
        "fineAmount": float(c.fine_amount or 0),
        "isOverdue": c.is_overdue(),
        "notes": c.notes,
        "book": {"title": c.book.title, "author": c.book.author} if c.book else None,
        "user": _user_json(c.user),
    }


def _reservation_json(r):
    return {
        "id": r.id,
        "bookId": r.book_id,
        "userId": r.user_id,
        "userType": r.user_type,
        "reservationDate": _iso(r.reservation_date),
        "expiryDate": _iso(r.expiry_date),
        "priority": r.priority,
        "status": r.status,
        "notes": r.notes,
        "book": {
            "title": r.book.title,
            "author": r.book.author,
            "availableCopies": r.book.available_copies,
        } if r.book else None,
        "user": _user_json(r.user),
    }


def _fine_json(f):
    return {
        "id": f.id,
        "circulationId": f.circulation_id,
        "userId": f.user_id,
        "amount": float(f.amount),
        "fineType": f.fine_type,
        "status": f.status,
        "createdAt": _iso(f.created_at),
        "paidAt": _iso(f.paid_at),
    }


# -----------------------------
# Users
# -----------------------------
@library_bp.get("/users/search")
@permission_required(LIBRARY_MANAGE)
def search_users():
    users = _service(UserService).search_users(request.args.get("search"), request.args.get("userType"))
    return jsonify({"success": True, "data": [
        {"id": u.id, "firstName": u.first_name, "lastName": u.last_name, "email": u.email}
        for u in users
    ]})


# -----------------------------
# Books
# -----------------------------
@library_bp.get("/books")
@permission_required(LIBRARY_READ, LIBRARY_MANAGE)
def list_books():
    service = _service(BookService)
    page, limit = _page_args()
    query = service.list_books(
        search=request.args.get("search"),
        category=request.args.get("category"),
        author=request.args.get("author"),
        status=request.args.get("status"),
        condition=request.args.get("condition"),
        available=request.args.get("available") == "true",
    )
    books, pagination = paginate(query, page, limit)
    borrowed, reserved = service.usage_counts(books)
    return jsonify({
        "success": True,
        "data": [_book_json(b, borrowed.get(b.id, 0), reserved.get(b.id, 0)) for b in books],
        "pagination": pagination,
    })


@library_bp.get("/books/<int:book_id>")
@permission_required(LIBRARY_READ, LIBRARY_MANAGE)
def get_book(book_id: int):
    service = _service(BookService)
    book = service.get_book(book_id)
    circulations, reservations = service.book_activity(book)
    data = _book_json(book)
    data["circulations"] = [_circulation_json(c) for c in circulations]
    data["reservations"] = [_reservation_json(r) for r in reservations]
    return jsonify({"success": True, "data": data})


@library_bp.post("/books")
@permission_required(LIBRARY_CREATE, LIBRARY_MANAGE)
def create_book():
    book = _service(BookService).create_book(_body())
    return jsonify({"success": True, "message": "Book created successfully", "data": _book_json(book)}), 201


@library_bp.put("/books/<int:book_id>")
@permission_required(LIBRARY_UPDATE, LIBRARY_MANAGE)
def update_book(book_id: int):
    book = _service(BookService).update_book(book_id, _body())
    return jsonify({"success": True, "message": "Book updated successfully", "data": _book_json(book)})


@library_bp.delete("/books/<int:book_id>")
@permission_required(LIBRARY_DELETE, LIBRARY_MANAGE)
def delete_book(book_id: int):
    _service(BookService).delete_book(book_id)
    return jsonify({"success": True, "message": "Book deleted successfully"})


# -----------------------------
# Circulations
# -----------------------------
@library_bp.get("/circulations")
@permission_required(LIBRARY_READ, LIBRARY_MANAGE)
def list_circulations():
    page, limit = _page_args()
    query = _service(CirculationService).list_borrowed(search=request.args.get("search"))
    rows, pagination = paginate(query, page, limit)
    return jsonify({"success": True, "data": [_circulation_json(c) for c in rows], "pagination": pagination})


@library_bp.post("/circulations/issue")
@permission_required(LIBRARY_CREATE, LIBRARY_MANAGE)
def issue_book():
    data = _body()
    c = _service(CirculationService).issue_book(
        book_id=_as_id(data.get("bookId"), "bookId"),
        user_id=_as_id(data.get("userId"), "userId"),
        user_type=data.get("userType"),
        due_date=data.get("dueDate"),
        notes=data.get("notes"),
    )
    return jsonify({"success": True, "message": "Book issued successfully", "data": _circulation_json(c)}), 201


@library_bp.put("/circulations/<int:circulation_id>/return")
@permission_required(LIBRARY_UPDATE, LIBRARY_MANAGE)
def return_book(circulation_id: int):
    data = _body()
    c = _service(CirculationService).return_book(
        circulation_id,
        condition=data.get("condition"),
        notes=data.get("notes"),
        fine_amount=data.get("fineAmount"),
    )
    return jsonify({"success": True, "message": "Book returned successfully", "data": _circulation_json(c)})


@library_bp.put("/circulations/<int:circulation_id>/renew")
@permission_required(LIBRARY_UPDATE, LIBRARY_MANAGE)
def renew_book(circulation_id: int):
    data = _body()
    c = _service(CirculationService).renew_book(
        circulation_id,
        new_due_date=data.get("newDueDate"),
        notes=data.get("notes"),
    )
    return jsonify({"success": True, "message": "Book renewed successfully", "data": _circulation_json(c)})


# -----------------------------
# Reservations
# -----------------------------
@library_bp.get("/reservations")
@permission_required(LIBRARY_READ, LIBRARY_MANAGE)
def list_reservations():
    page, limit = _page_args()
    query = _service(ReservationService).list_reservations(
        status=request.args.get("status"),
        search=request.args.get("search"),
    )
    rows, pagination = paginate(query, page, limit)
    return jsonify({"success": True, "data": [_reservation_json(r) for r in rows], "pagination": pagination})


@library_bp.post("/reservations")
@permission_required(LIBRARY_CREATE, LIBRARY_MANAGE)
def create_reservation():
    data = _body()
    r = _service(ReservationService).create_reservation(
        book_id=_as_id(data.get("bookId"), "bookId"),
        user_id=_as_id(data.get("userId"), "userId"),
        user_type=data.get("userType"),
        expiry_date=data.get("expiryDate"),
        notes=data.get("notes"),
    )
    return jsonify({"success": True, "message": "Reservation created successfully", "data": _reservation_json(r)}), 201


@library_bp.put("/reservations/<int:reservation_id>/cancel")
@permission_required(LIBRARY_UPDATE, LIBRARY_MANAGE)
def cancel_reservation(reservation_id: int):
    r = _service(ReservationService).cancel_reservation(reservation_id, reason=_body().get("reason"))
    return jsonify({"success": True, "message": "Reservation cancelled successfully", "data": _reservation_json(r)})


# -----------------------------
# Fines
# -----------------------------
@library_bp.get("/fines")
@permission_required(LIBRARY_READ, LIBRARY_MANAGE)
def list_fines():
    page, limit = _page_args()
    query = _service(FineService).list_fines(
        status=request.args.get("status"),
        user_id=_as_id(request.args.get("userId"), "userId"),
    )
    rows, pagination = paginate(query, page, limit)
    return jsonify({"success": True, "data": [_fine_json(f) for f in rows], "pagination": pagination})


@library_bp.put("/fines/<int:fine_id>/pay")
@permission_required(LIBRARY_UPDATE, LIBRARY_MANAGE)
def pay_fine(fine_id: int):
    f = _service(FineService).pay_fine(fine_id)
    return jsonify({"success": True, "message": "Fine paid", "data": _fine_json(f)})


# -----------------------------
# Stats & jobs
# -----------------------------
@library_bp.get("/stats")
@permission_required(LIBRARY_READ, LIBRARY_MANAGE)
def library_stats():
    return jsonify({"success": True, "data": _service(StatsService).library_stats()})


@library_bp.post("/notifications/run-late-check")
@permission_required(LIBRARY_MANAGE)
def run_late_check():
    summary = NotificationService(db.session).run_for_tenant(g.tenant_id)
    return jsonify({"success": True, "message": "Late check completed", "data": summary})
