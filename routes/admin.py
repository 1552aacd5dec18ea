"""Admin blueprint for reviewing NGO and campaigner profiles."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest, NotFound

from routes.access import require_role
from services.context import get_services

admin_bp = Blueprint("admin", __name__)

REVIEWABLE_ROLES = ("ngo", "campaigner")


def _reviewable_role(role: str) -> str:
    role = (role or "").strip().lower()
    if role not in REVIEWABLE_ROLES:
        raise BadRequest("role must be one of: ngo, campaigner.")
    return role


def _serialize_pending(role: str, profile) -> dict:
    return {
        "user_id": profile.user_id,
        "email": profile.account.email,
        "role": role,
        "profile": profile.snapshot(),
        "created_at": profile.account.created_at.isoformat()
        if profile.account.created_at
        else None,
    }


@admin_bp.route("/pending", methods=["GET"])
@jwt_required()
def list_pending_profiles():
    """Return NGO or campaigner profiles still awaiting approval."""

    require_role("admin")
    role = _reviewable_role(request.args.get("role", "ngo"))

    profiles = get_services().store.list_profiles(role, approved=False)
    return jsonify([_serialize_pending(role, profile) for profile in profiles])


def _set_approval(role: str, account_id: int, approved: bool):
    reviewer = require_role("admin")
    role = _reviewable_role(role)

    store = get_services().store
    if role == "ngo":
        profile = store.set_ngo_approval(account_id, approved)
    else:
        profile = store.set_campaigner_approval(account_id, approved)
    if profile is None:
        raise NotFound("Profile not found.")

    current_app.logger.info(
        "Admin %s set %s %s approval to %s", reviewer.id, role, account_id, approved
    )
    return jsonify(
        {"user_id": account_id, "role": role, "approved": bool(profile.is_approved)}
    )


@admin_bp.route("/<role>/<int:account_id>/approve", methods=["POST"])
@jwt_required()
def approve_profile(role: str, account_id: int):
    return _set_approval(role, account_id, True)


@admin_bp.route("/<role>/<int:account_id>/reject", methods=["POST"])
@jwt_required()
def reject_profile(role: str, account_id: int):
    return _set_approval(role, account_id, False)
