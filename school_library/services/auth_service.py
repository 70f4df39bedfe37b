from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token

from school_library.extensions import db
from school_library.models.user import User
from school_library.repositories.user_repo import UserRepo
from school_library.utils.errors import ConflictError, ValidationError


class AuthService:
    @staticmethod
    def register(tenant_id: int, email: str, password: str, first_name: str,
                 last_name: str = "", role: str = "student"):
        if not email or not password or not first_name:
            raise ValidationError("email/password/first name required")
        if UserRepo.get_by_email(db.session, email):
            raise ConflictError("Email already registered")

        user = User(
            tenant_id=tenant_id,
            email=email,
            first_name=first_name,
            last_name=last_name or "",
            password_hash=generate_password_hash(password),
            role=role,
        )
        db.session.add(user)
        db.session.commit()
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(
            identity=str(user.id),
            additional_claims={"tenant_id": user.tenant_id, "role": user.role},
        )

    @staticmethod
    def login(email: str, password: str):
        user = UserRepo.get_by_email(db.session, email)
        if not user or not check_password_hash(user.password_hash, password):
            raise ValidationError("Invalid email or password")
        if user.status != User.STATUS_ACTIVE:
            raise ValidationError("Account is not active")

        return AuthService.issue_token(user), user
