from flask import Blueprint, jsonify, request

from cinereview.auth import current_user, require_auth
from cinereview.schemas import LoginRequest, RegisterRequest
from cinereview.services.users import authenticate, register_user

bp = Blueprint("auth", __name__)


@bp.route("/register", methods=["POST"])
def register():
    """
    POST /api/auth/register
    Body: {"username": "...", "email": "...", "password": "..."}
    """
    payload = RegisterRequest.model_validate(request.get_json(silent=True) or {})
    user, token = register_user(payload)
    return jsonify({
        "status": "success",
        "message": "User registered successfully",
        "token": token,
        "user": user.to_dict(),
    }), 201


@bp.route("/login", methods=["POST"])
def login():
    payload = LoginRequest.model_validate(request.get_json(silent=True) or {})
    user, token = authenticate(payload)
    return jsonify({
        "status": "success",
        "message": "Login successful",
        "token": token,
        "user": user.to_dict(),
    })


@bp.route("/me", methods=["GET"])
@require_auth
def me():
    return jsonify({"user": current_user().to_dict()})
