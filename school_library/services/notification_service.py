from datetime import timedelta

from flask import current_app

from school_library.models.notification_log import NotificationLog
from school_library.models.tenant import Tenant
from school_library.repositories.circulation_repo import CirculationRepo
from school_library.repositories.notification_repo import NotificationRepo
from school_library.services.mail_service import MailService
from school_library.utils.dates import utcnow


class NotificationService:
    """
    Reminder mails for loans that are overdue or due within a day. Only
    NotificationLog rows are written; loans, books and fines are left alone.
    """

    def __init__(self, session):
        self.session = session

    def _notify(self, notifications: NotificationRepo, circulation, notif_type: str) -> bool:
        if notifications.already_sent(circulation.id, notif_type):
            return False

        subject, body = MailService.reminder_text(circulation, notif_type)
        to_email = circulation.user.email if circulation.user else None
        if to_email:
            ok, err = MailService.send_email(to_email, subject, body)
        else:
            ok, err = False, "missing_email"

        notifications.log(NotificationLog(
            circulation_id=circulation.id,
            type=notif_type,
            email=to_email,
            message=body[:1000],
            success=ok,
            error_message=err[:500] if err else None,
        ))
        return ok

    def run_for_tenant(self, tenant_id: int, now=None) -> dict:
        now = now or utcnow()
        circulations = CirculationRepo(self.session, tenant_id)
        notifications = NotificationRepo(self.session, tenant_id)

        overdue = circulations.find_overdue(now).all()
        due_soon = circulations.find_due_between(now, now + timedelta(days=1)).all()

        sent = {"overdue": 0, "due_soon": 0}
        for c in overdue:
            if self._notify(notifications, c, "overdue"):
                sent["overdue"] += 1
        for c in due_soon:
            if self._notify(notifications, c, "due_soon"):
                sent["due_soon"] += 1

        self.session.commit()
        return {
            "overdue": len(overdue),
            "dueSoon": len(due_soon),
            "overdueMailsSent": sent["overdue"],
            "dueSoonMailsSent": sent["due_soon"],
        }

    def run_all_tenants(self, now=None) -> dict:
        now = now or utcnow()
        results = {}
        tenant_ids = [t.id for t in self.session.query(Tenant).order_by(Tenant.id).all()]
        for tenant_id in tenant_ids:
            try:
                results[tenant_id] = self.run_for_tenant(tenant_id, now)
            except Exception as e:
                self.session.rollback()
                current_app.logger.exception(f"[late_check] tenant={tenant_id} failed: {e}")
        return results
