from school_library.models.fine import Fine
from school_library.repositories.base import unit_of_work
from school_library.repositories.fine_repo import FineRepo
from school_library.services.base import TenantService
from school_library.utils.dates import utcnow
from school_library.utils.errors import BusinessRuleError, NotFoundError


class FineService(TenantService):
    def __init__(self, session, tenant_id: int, actor_id: int = None, settings=None):
        super().__init__(session, tenant_id, actor_id, settings)
        self.fines = FineRepo(session, tenant_id)

    def list_fines(self, status=None, user_id=None):
        return self.fines.filtered(status=status, user_id=user_id)

    def pay_fine(self, fine_id) -> Fine:
        with unit_of_work(self.session):
            fine = self.fines.get(fine_id)
            if not fine:
                raise NotFoundError("Fine not found")
            if fine.status == Fine.PAID:
                raise BusinessRuleError("Fine already paid")
            fine.status = Fine.PAID
            fine.paid_at = utcnow()

        self.log.info(f"[fines] tenant={self.tenant_id} fine={fine.id} paid amount={fine.amount}")
        return fine
