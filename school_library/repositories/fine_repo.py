from decimal import Decimal

from sqlalchemy import func

from school_library.models.fine import Fine
from school_library.repositories.base import TenantRepo


class FineRepo(TenantRepo):
    model = Fine

    def filtered(self, status=None, user_id=None):
        q = self._query()
        if status:
            q = q.filter(Fine.status == status)
        if user_id:
            q = q.filter(Fine.user_id == user_id)
        return q.order_by(Fine.id.desc())

    def for_circulation(self, circulation_id: int):
        return self._query().filter(Fine.circulation_id == circulation_id).all()

    def unpaid_summary(self):
        """(count, total amount) of UNPAID fines."""
        count, total = (
            self._query()
            .with_entities(func.count(Fine.id), func.coalesce(func.sum(Fine.amount), 0))
            .filter(Fine.status == Fine.UNPAID)
            .one()
        )
        return count, Decimal(str(total))
