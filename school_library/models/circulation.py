from school_library.extensions import db
from school_library.utils.dates import utcnow


class Circulation(db.Model):
    __tablename__ = "book_circulations"

    BORROWED = "BORROWED"
    RETURNED = "RETURNED"

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    user_type = db.Column(db.String(20), nullable=False, default="STUDENT")

    borrow_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    due_date = db.Column(db.DateTime, nullable=False)
    return_date = db.Column(db.DateTime, nullable=True)

    renewal_count = db.Column(db.Integer, nullable=False, default=0)
    max_renewals = db.Column(db.Integer, nullable=False, default=2)

    status = db.Column(db.String(20), nullable=False, default=BORROWED, index=True)
    fine_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    issued_by = db.Column(db.Integer, nullable=True)
    returned_by = db.Column(db.Integer, nullable=True)

    book = db.relationship("Book", backref="circulations")
    user = db.relationship("User", backref="circulations")

    def is_overdue(self, now=None) -> bool:
        now = now or utcnow()
        return self.status == self.BORROWED and self.due_date < now
