from datetime import timedelta

from school_library.extensions import db, mail
from school_library.models import Book, Circulation, Fine, NotificationLog
from school_library.services.circulation_service import CirculationService
from school_library.services.notification_service import NotificationService
from school_library.tasks.late_check import run_late_check_job
from school_library.utils.dates import utcnow


def _loan(tenant, librarian, book, user, due):
    c = CirculationService(db.session, tenant.id, actor_id=librarian.id).issue_book(book.id, user.id)
    c.due_date = due
    db.session.commit()
    return c


def test_reminders_sent_once_per_loan(app, tenant, librarian, make_book, student_a, student_b, make_user):
    now = utcnow()
    late = _loan(tenant, librarian, make_book(tenant, title="Late"), student_a, now - timedelta(days=2))
    soon = _loan(tenant, librarian, make_book(tenant, title="Soon"), student_b, now + timedelta(hours=6))
    _loan(tenant, librarian, make_book(tenant, title="Later"), make_user(tenant), now + timedelta(days=5))

    with mail.record_messages() as outbox:
        summary = NotificationService(db.session).run_for_tenant(tenant.id)
        again = NotificationService(db.session).run_for_tenant(tenant.id)

    assert summary == {"overdue": 1, "dueSoon": 1, "overdueMailsSent": 1, "dueSoonMailsSent": 1}
    assert again["overdueMailsSent"] == 0 and again["dueSoonMailsSent"] == 0
    assert len(outbox) == 2
    assert {m.recipients[0] for m in outbox} == {student_a.email, student_b.email}
    assert "'Late' was due" in next(m.body for m in outbox if m.recipients[0] == student_a.email)

    logs = db.session.query(NotificationLog).order_by(NotificationLog.id).all()
    assert [(log.circulation_id, log.type, log.success) for log in logs] == [
        (late.id, "overdue", True),
        (soon.id, "due_soon", True),
    ]


def test_reminders_do_not_touch_loans_or_fines(app, tenant, librarian, make_book, student_a):
    book = make_book(tenant)
    c = _loan(tenant, librarian, book, student_a, utcnow() - timedelta(days=10))

    run_late_check_job(app)

    c = db.session.get(Circulation, c.id)
    assert c.status == Circulation.BORROWED
    assert c.return_date is None
    assert db.session.get(Book, book.id).available_copies == 0
    assert db.session.query(Fine).count() == 0
    assert db.session.query(NotificationLog).count() == 1


def test_job_covers_every_tenant(app, tenant, other_tenant, librarian, make_user, make_book, student_a):
    _loan(tenant, librarian, make_book(tenant), student_a, utcnow() - timedelta(days=1))
    other_staff = make_user(other_tenant, role="librarian")
    _loan(other_tenant, other_staff, make_book(other_tenant), make_user(other_tenant), utcnow() - timedelta(days=1))

    results = run_late_check_job(app)

    assert set(results) == {tenant.id, other_tenant.id}
    assert all(r["overdueMailsSent"] == 1 for r in results.values())


def test_late_check_endpoint_is_tenant_scoped(client, tenant, other_tenant, librarian, make_user,
                                              make_book, student_a, auth_header):
    _loan(tenant, librarian, make_book(tenant), student_a, utcnow() - timedelta(days=1))
    other_staff = make_user(other_tenant, role="librarian")
    _loan(other_tenant, other_staff, make_book(other_tenant), make_user(other_tenant), utcnow() - timedelta(days=1))

    r = client.post("/api/library/notifications/run-late-check", headers=auth_header(librarian))

    assert r.status_code == 200
    assert r.get_json()["data"]["overdue"] == 1
    assert db.session.query(NotificationLog).filter_by(tenant_id=other_tenant.id).count() == 0


def test_scheduler_disabled_in_tests(app):
    assert "apscheduler" not in app.extensions
