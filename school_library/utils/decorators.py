from functools import wraps

from flask import g, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from school_library.extensions import db
from school_library.models.user import User
from school_library.repositories.user_repo import UserRepo
from school_library.utils.errors import PermissionDeniedError
from school_library.utils.permissions import SUPER_ADMIN, permissions_for


def tenant_required(fn):
    """
    Verifies the bearer token, loads the user and pins the request to the
    user's tenant (g.current_user, g.tenant_id).
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        try:
            user_id = int(get_jwt_identity())
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "Invalid token"}), 401

        user = UserRepo.get_by_id(db.session, user_id)
        if not user:
            return jsonify({"success": False, "message": "Invalid token - user not found"}), 401
        if user.status != User.STATUS_ACTIVE:
            return jsonify({"success": False, "message": "Account is not active"}), 401

        g.current_user = user
        g.tenant_id = user.tenant_id
        return fn(*args, **kwargs)
    return wrapper


def permission_required(*permissions):
    """Any one of the listed permissions is enough; super admins always pass."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if user is None:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            if user.role != SUPER_ADMIN and not (permissions_for(user.role) & set(permissions)):
                raise PermissionDeniedError("Insufficient permissions")
            return fn(*args, **kwargs)
        return wrapper
    return decorator
