from __future__ import annotations

from flask import current_app
from flask_mail import Message

from school_library.extensions import mail


class MailService:
    @staticmethod
    def send_email(to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            msg = Message(subject=subject, recipients=[to_email], body=body)
            mail.send(msg)
            return True, None
        except Exception as e:
            current_app.logger.warning(f"[MailService] mail to {to_email} failed: {e}")
            return False, str(e)

    @staticmethod
    def reminder_text(circulation, notif_type: str) -> tuple[str, str]:
        user = circulation.user
        book = circulation.book
        name = user.full_name if user else "Reader"
        title = book.title if book else f"Book #{circulation.book_id}"
        due = circulation.due_date.strftime("%Y-%m-%d")

        if notif_type == "overdue":
            subject = "Library: overdue book"
            body = (
                f"Hello {name},\n\n"
                f"'{title}' was due on {due}.\n\n"
                f"Please return it to the library as soon as possible.\n"
            )
        else:
            subject = "Library: book due soon"
            body = (
                f"Hello {name},\n\n"
                f"'{title}' is due on {due}.\n\n"
                f"Please return or renew it before then.\n"
            )
        return subject, body
