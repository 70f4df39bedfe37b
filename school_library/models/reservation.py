from school_library.extensions import db
from school_library.utils.dates import utcnow


class Reservation(db.Model):
    __tablename__ = "book_reservations"

    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    FULFILLED = "FULFILLED"

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    user_type = db.Column(db.String(20), nullable=False, default="STUDENT")

    reservation_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    expiry_date = db.Column(db.DateTime, nullable=False)

    # queue position among the book's ACTIVE reservations, 1 = first in line
    priority = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(20), nullable=False, default=ACTIVE, index=True)
    notes = db.Column(db.Text, nullable=True)

    book = db.relationship("Book", backref="reservations")
    user = db.relationship("User", backref="reservations")
