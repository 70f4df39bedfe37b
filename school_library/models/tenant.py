from school_library.extensions import db
from school_library.utils.dates import utcnow


class Tenant(db.Model):
    __tablename__ = "tenants"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="ACTIVE")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
