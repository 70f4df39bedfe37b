from flask import current_app

from school_library.extensions import db
from school_library.services.notification_service import NotificationService


def run_late_check_job(app):
    """
    Sends overdue / due-soon reminders for every tenant and logs a summary.
    """
    with app.app_context():
        try:
            results = NotificationService(db.session).run_all_tenants()
            overdue = sum(r["overdue"] for r in results.values())
            due_soon = sum(r["dueSoon"] for r in results.values())
            mails = sum(r["overdueMailsSent"] + r["dueSoonMailsSent"] for r in results.values())
            current_app.logger.info(
                f"[late_check] tenants={len(results)} overdue={overdue} due_soon={due_soon} mails_sent={mails}"
            )
            return results
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[late_check] error: {e}")
            return {}
