from flask import Blueprint, g, jsonify, request

from school_library.services.auth_service import AuthService
from school_library.utils.decorators import tenant_required
from school_library.utils.errors import ValidationError

auth_bp = Blueprint("auth", __name__)


def _user_payload(user):
    return {
        "id": user.id,
        "tenantId": user.tenant_id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "role": user.role,
    }


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    try:
        token, user = AuthService.login(
            (data.get("email") or "").strip(),
            (data.get("password") or "").strip(),
        )
        return jsonify({"success": True, "access_token": token, "user": _user_payload(user)})
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 401


@auth_bp.get("/me")
@tenant_required
def me():
    return jsonify({"success": True, "user": _user_payload(g.current_user)})
