from school_library.extensions import db
from school_library.utils.dates import utcnow


class User(db.Model):
    __tablename__ = "users"

    STATUS_ACTIVE = "ACTIVE"

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False, default="")
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # super_admin / admin / librarian / teacher / student
    role = db.Column(db.String(30), nullable=False, default="student")
    status = db.Column(db.String(20), nullable=False, default=STATUS_ACTIVE)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    tenant = db.relationship("Tenant", backref="users")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
