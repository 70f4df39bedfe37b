from decimal import Decimal, InvalidOperation

from flask import current_app

from school_library.utils.errors import ValidationError


class TenantService:
    """Holds the injected session, the tenant being served and the acting user."""

    def __init__(self, session, tenant_id: int, actor_id: int = None, settings=None):
        self.session = session
        self.tenant_id = tenant_id
        self.actor_id = actor_id
        self.settings = settings if settings is not None else current_app.config

    @property
    def log(self):
        return current_app.logger


def parse_amount(value, field: str = "fineAmount"):
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field} must be zero or positive")
    return amount.quantize(Decimal("0.01"))
