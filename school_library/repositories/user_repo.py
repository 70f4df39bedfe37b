from sqlalchemy import or_

from school_library.models.user import User
from school_library.repositories.base import TenantRepo


class UserRepo(TenantRepo):
    model = User

    def search(self, text: str, user_type: str = None, limit: int = 10):
        like = f"%{text}%"
        q = self._query().filter(
            or_(User.first_name.ilike(like), User.last_name.ilike(like), User.email.ilike(like))
        )
        if user_type == "STUDENT":
            q = q.filter(User.role == "student")
        elif user_type == "TEACHER":
            q = q.filter(User.role == "teacher")
        return q.order_by(User.first_name.asc(), User.id.asc()).limit(limit).all()

    # login happens before a tenant is known
    @staticmethod
    def get_by_email(session, email: str):
        return session.query(User).filter(User.email == email).first()

    @staticmethod
    def get_by_id(session, user_id: int):
        return session.get(User, user_id)
