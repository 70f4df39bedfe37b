from school_library.extensions import db
from school_library.utils.dates import utcnow


class LibraryUser(db.Model):
    """Per-borrower circulation counters, created on first issue."""

    __tablename__ = "library_users"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "user_id", name="uq_library_users_tenant_user"),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    user_type = db.Column(db.String(20), nullable=False, default="STUDENT")

    current_borrowed = db.Column(db.Integer, nullable=False, default=0)
    total_borrowed = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", backref=db.backref("library_profile", uselist=False))
