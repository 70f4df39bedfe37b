from datetime import timedelta

import pytest

from school_library import create_app
from school_library.config import TestingConfig
from school_library.extensions import db
from school_library.models import Book, Circulation, Tenant
from school_library.services.auth_service import AuthService
from school_library.utils.dates import utcnow


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tenant(app):
    t = Tenant(name="Green Hill Secondary")
    db.session.add(t)
    db.session.commit()
    return t


@pytest.fixture
def other_tenant(app):
    t = Tenant(name="Riverside Primary")
    db.session.add(t)
    db.session.commit()
    return t


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(tenant, role="student", first_name=None, status="ACTIVE"):
        counter["n"] += 1
        user = AuthService.register(
            tenant_id=tenant.id,
            email=f"user{counter['n']}@school.test",
            password="secret123",
            first_name=first_name or f"User{counter['n']}",
            last_name="Tester",
            role=role,
        )
        if status != "ACTIVE":
            user.status = status
            db.session.commit()
        return user

    return _make


@pytest.fixture
def librarian(tenant, make_user):
    return make_user(tenant, role="librarian", first_name="Lena")


@pytest.fixture
def student_a(tenant, make_user):
    return make_user(tenant, first_name="Amina")


@pytest.fixture
def student_b(tenant, make_user):
    return make_user(tenant, first_name="Baraka")


@pytest.fixture
def make_book(app):
    def _make(tenant, total=1, available=None, title="Things Fall Apart", **extra):
        book = Book(
            tenant_id=tenant.id,
            title=title,
            author=extra.pop("author", "Chinua Achebe"),
            category=extra.pop("category", "Literature"),
            total_copies=total,
            available_copies=total if available is None else available,
            **extra,
        )
        db.session.add(book)
        db.session.commit()
        return book

    return _make


@pytest.fixture
def auth_header(app):
    def _header(user):
        return {"Authorization": f"Bearer {AuthService.issue_token(user)}"}

    return _header


@pytest.fixture
def backdate(app):
    """Moves a loan's due date into the past."""
    def _backdate(circulation: Circulation, days: int = 3):
        circulation.due_date = utcnow() - timedelta(days=days)
        db.session.commit()
        return circulation

    return _backdate
