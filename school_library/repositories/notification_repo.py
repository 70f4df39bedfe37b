from school_library.models.notification_log import NotificationLog
from school_library.repositories.base import TenantRepo


class NotificationRepo(TenantRepo):
    model = NotificationLog

    def already_sent(self, circulation_id: int, notif_type: str) -> bool:
        return (
            self._query()
            .filter(
                NotificationLog.circulation_id == circulation_id,
                NotificationLog.type == notif_type,
                NotificationLog.success.is_(True),
            )
            .first()
            is not None
        )

    def log(self, entry: NotificationLog):
        return self.add(entry)
