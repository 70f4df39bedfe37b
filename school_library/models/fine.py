from school_library.extensions import db
from school_library.utils.dates import utcnow


class Fine(db.Model):
    __tablename__ = "library_fines"

    OVERDUE = "OVERDUE"
    OTHER = "OTHER"

    UNPAID = "UNPAID"
    PAID = "PAID"

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    circulation_id = db.Column(db.Integer, db.ForeignKey("book_circulations.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    fine_type = db.Column(db.String(20), nullable=False, default=OVERDUE)
    status = db.Column(db.String(20), nullable=False, default=UNPAID, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    paid_at = db.Column(db.DateTime, nullable=True)

    circulation = db.relationship("Circulation", backref="fines")
    user = db.relationship("User", backref="fines")
