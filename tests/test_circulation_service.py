from datetime import timedelta
from decimal import Decimal

import pytest

from school_library.extensions import db
from school_library.models import Book, Circulation, Fine, LibraryUser, Reservation
from school_library.services.circulation_service import CirculationService
from school_library.services.reservation_service import ReservationService
from school_library.utils.errors import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def circulation(tenant, librarian):
    return CirculationService(db.session, tenant.id, actor_id=librarian.id)


@pytest.fixture
def reservations(tenant, librarian):
    return ReservationService(db.session, tenant.id, actor_id=librarian.id)


def _circulation_count():
    return db.session.query(Circulation).count()


# -----------------------------
# Issue
# -----------------------------
def test_issue_creates_loan_and_takes_a_copy(circulation, tenant, make_book, student_a, librarian):
    book = make_book(tenant, total=2)

    c = circulation.issue_book(book.id, student_a.id, "STUDENT", notes="first loan")

    assert c.status == Circulation.BORROWED
    assert c.tenant_id == tenant.id
    assert c.issued_by == librarian.id
    assert c.renewal_count == 0
    assert c.max_renewals == 2
    assert c.due_date - c.borrow_date == timedelta(days=14)
    assert db.session.get(Book, book.id).available_copies == 1

    profile = db.session.query(LibraryUser).filter_by(user_id=student_a.id).one()
    assert profile.current_borrowed == 1
    assert profile.total_borrowed == 1


def test_issue_uses_given_due_date(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id, due_date="2031-03-01T09:30:00Z")
    assert c.due_date.isoformat() == "2031-03-01T09:30:00"


def test_issue_without_copies_fails_and_writes_nothing(circulation, tenant, make_book, student_a):
    book = make_book(tenant, total=1, available=0)

    with pytest.raises(BusinessRuleError, match="not available"):
        circulation.issue_book(book.id, student_a.id)

    assert _circulation_count() == 0
    assert db.session.get(Book, book.id).available_copies == 0
    assert db.session.query(LibraryUser).count() == 0


def test_second_active_loan_of_same_book_is_rejected(circulation, tenant, make_book, student_a):
    book = make_book(tenant, total=3)
    circulation.issue_book(book.id, student_a.id)

    with pytest.raises(ConflictError):
        circulation.issue_book(book.id, student_a.id)

    assert _circulation_count() == 1
    assert db.session.get(Book, book.id).available_copies == 2


def test_issue_again_after_return_is_allowed(circulation, tenant, make_book, student_a):
    book = make_book(tenant, total=1)
    first = circulation.issue_book(book.id, student_a.id)
    circulation.return_book(first.id)

    second = circulation.issue_book(book.id, student_a.id)
    assert second.id != first.id
    assert db.session.get(Book, book.id).available_copies == 0


def test_issue_requires_book_and_user(circulation):
    with pytest.raises(ValidationError):
        circulation.issue_book(None, 1)


def test_issue_unknown_book_or_user(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    with pytest.raises(NotFoundError, match="Book not found"):
        circulation.issue_book(9999, student_a.id)
    with pytest.raises(NotFoundError, match="User not found"):
        circulation.issue_book(book.id, 9999)
    assert db.session.get(Book, book.id).available_copies == 1


def test_issue_does_not_cross_tenants(circulation, tenant, other_tenant, make_book, make_user, student_a):
    foreign_book = make_book(other_tenant)
    foreign_user = make_user(other_tenant)
    local_book = make_book(tenant)

    with pytest.raises(NotFoundError):
        circulation.issue_book(foreign_book.id, student_a.id)
    with pytest.raises(NotFoundError):
        circulation.issue_book(local_book.id, foreign_user.id)

    assert db.session.get(Book, foreign_book.id).available_copies == 1


def test_issue_fulfils_the_borrowers_own_reservation(circulation, reservations, tenant, make_book,
                                                     student_a, student_b):
    """Local rule: issuing to a queued user closes their reservation; a return alone does not."""
    book = make_book(tenant, total=1)
    loan = circulation.issue_book(book.id, student_a.id)
    r = reservations.create_reservation(book.id, student_b.id)
    circulation.return_book(loan.id)

    circulation.issue_book(book.id, student_b.id)

    assert db.session.get(Reservation, r.id).status == Reservation.FULFILLED


# -----------------------------
# Return
# -----------------------------
def test_return_puts_copy_back(circulation, tenant, make_book, student_a, librarian):
    book = make_book(tenant, total=1)
    c = circulation.issue_book(book.id, student_a.id)

    returned = circulation.return_book(c.id, condition="FAIR", notes="cover worn")

    assert returned.status == Circulation.RETURNED
    assert returned.return_date is not None
    assert returned.returned_by == librarian.id
    assert returned.notes == "cover worn"
    book = db.session.get(Book, book.id)
    assert book.available_copies == 1
    assert book.condition == "FAIR"
    profile = db.session.query(LibraryUser).filter_by(user_id=student_a.id).one()
    assert profile.current_borrowed == 0
    assert profile.total_borrowed == 1
    assert db.session.query(Fine).count() == 0


def test_return_twice_is_not_found(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id)
    circulation.return_book(c.id)

    with pytest.raises(NotFoundError):
        circulation.return_book(c.id)
    assert db.session.get(Book, book.id).available_copies == 1


def test_overdue_return_with_fine_creates_overdue_fine(circulation, tenant, make_book, student_a, backdate):
    book = make_book(tenant)
    c = backdate(circulation.issue_book(book.id, student_a.id), days=4)

    circulation.return_book(c.id, fine_amount="2.50")

    fines = db.session.query(Fine).all()
    assert len(fines) == 1
    assert fines[0].fine_type == Fine.OVERDUE
    assert fines[0].status == Fine.UNPAID
    assert fines[0].amount == Decimal("2.50")
    assert fines[0].user_id == student_a.id
    assert db.session.get(Circulation, c.id).fine_amount == Decimal("2.50")


def test_on_time_return_with_fine_creates_other_fine(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id)

    circulation.return_book(c.id, fine_amount=10)

    fine = db.session.query(Fine).one()
    assert fine.fine_type == Fine.OTHER
    assert fine.amount == Decimal("10.00")


def test_zero_fine_creates_no_row(circulation, tenant, make_book, student_a, backdate):
    book = make_book(tenant)
    c = backdate(circulation.issue_book(book.id, student_a.id))
    circulation.return_book(c.id, fine_amount=0)
    assert db.session.query(Fine).count() == 0


def test_negative_fine_is_rejected_before_any_write(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id)

    with pytest.raises(ValidationError):
        circulation.return_book(c.id, fine_amount=-1)

    assert db.session.get(Circulation, c.id).status == Circulation.BORROWED
    assert db.session.get(Book, book.id).available_copies == 0


def test_fine_rate_applies_when_amount_omitted(app, circulation, tenant, make_book, student_a, backdate):
    app.config["LIBRARY_FINE_PER_DAY"] = "0.50"
    book = make_book(tenant)
    c = backdate(circulation.issue_book(book.id, student_a.id), days=3)

    circulation.return_book(c.id)

    fine = db.session.query(Fine).one()
    assert fine.fine_type == Fine.OVERDUE
    assert fine.amount == Decimal("1.50")


def test_no_fine_by_default_when_amount_omitted(circulation, tenant, make_book, student_a, backdate):
    book = make_book(tenant)
    c = backdate(circulation.issue_book(book.id, student_a.id), days=3)
    circulation.return_book(c.id)
    assert db.session.query(Fine).count() == 0


# -----------------------------
# Renew
# -----------------------------
def test_renew_extends_from_current_due_date(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id)
    old_due = c.due_date

    renewed = circulation.renew_book(c.id)

    assert renewed.renewal_count == 1
    assert renewed.due_date == old_due + timedelta(days=14)


def test_renew_stops_at_max_renewals(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id)
    circulation.renew_book(c.id)
    circulation.renew_book(c.id)
    due_after_two = db.session.get(Circulation, c.id).due_date

    with pytest.raises(BusinessRuleError, match="Maximum renewals"):
        circulation.renew_book(c.id)

    c = db.session.get(Circulation, c.id)
    assert c.renewal_count == 2
    assert c.due_date == due_after_two


def test_renew_blocked_by_active_reservation(circulation, reservations, tenant, make_book, student_a, student_b):
    book = make_book(tenant, total=1)
    c = circulation.issue_book(book.id, student_a.id)
    reservations.create_reservation(book.id, student_b.id)

    with pytest.raises(BusinessRuleError, match="active reservations"):
        circulation.renew_book(c.id)

    assert db.session.get(Circulation, c.id).renewal_count == 0


def test_renew_allowed_again_once_reservation_cancelled(circulation, reservations, tenant, make_book,
                                                       student_a, student_b):
    book = make_book(tenant, total=1)
    c = circulation.issue_book(book.id, student_a.id)
    r = reservations.create_reservation(book.id, student_b.id)
    reservations.cancel_reservation(r.id)

    assert circulation.renew_book(c.id).renewal_count == 1


def test_renew_with_explicit_date(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id)
    target = (c.due_date + timedelta(days=3)).replace(microsecond=0)

    renewed = circulation.renew_book(c.id, new_due_date=target.isoformat(), notes="exam week")

    assert renewed.due_date == target
    assert renewed.notes == "exam week"


def test_renew_rejects_earlier_date(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id)

    with pytest.raises(ValidationError):
        circulation.renew_book(c.id, new_due_date=(c.due_date - timedelta(days=1)).isoformat())
    assert db.session.get(Circulation, c.id).renewal_count == 0


def test_renew_returned_loan_is_not_found(circulation, tenant, make_book, student_a):
    book = make_book(tenant)
    c = circulation.issue_book(book.id, student_a.id)
    circulation.return_book(c.id)
    with pytest.raises(NotFoundError):
        circulation.renew_book(c.id)


# -----------------------------
# Copy counters
# -----------------------------
def test_copy_counts_stay_in_bounds(circulation, tenant, make_book, make_user):
    book = make_book(tenant, total=2)
    readers = [make_user(tenant) for _ in range(3)]
    loans = []

    for step, reader in enumerate(readers + readers):
        try:
            loans.append(circulation.issue_book(book.id, reader.id))
        except (BusinessRuleError, ConflictError):
            pass
        if step % 2 and loans:
            circulation.return_book(loans.pop(0).id)

        current = db.session.get(Book, book.id)
        assert 0 <= current.available_copies <= current.total_copies
        borrowed = db.session.query(Circulation).filter_by(status=Circulation.BORROWED).count()
        assert current.available_copies == current.total_copies - borrowed
