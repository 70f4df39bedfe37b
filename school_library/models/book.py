from school_library.extensions import db
from school_library.utils.dates import utcnow


class Book(db.Model):
    __tablename__ = "books"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "isbn", name="uq_books_tenant_isbn"),
        db.CheckConstraint("available_copies >= 0", name="ck_books_available_non_negative"),
        db.CheckConstraint("available_copies <= total_copies", name="ck_books_available_le_total"),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False, index=True)
    author = db.Column(db.String(200), nullable=False, index=True)
    isbn = db.Column(db.String(32), nullable=True, index=True)
    barcode = db.Column(db.String(64), nullable=True)
    category = db.Column(db.String(100), nullable=False)
    publisher = db.Column(db.String(200), nullable=True)
    location = db.Column(db.String(100), nullable=True)

    total_copies = db.Column(db.Integer, nullable=False, default=1)
    available_copies = db.Column(db.Integer, nullable=False, default=1)

    condition = db.Column(db.String(20), nullable=False, default="GOOD")  # NEW/GOOD/FAIR/POOR/DAMAGED
    status = db.Column(db.String(20), nullable=False, default="AVAILABLE")

    created_by = db.Column(db.Integer, nullable=True)
    updated_by = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
