"""Authentication blueprint providing signup and login endpoints."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from models import PROFILE_MODELS
from routes.access import require_role
from services.context import get_services
from utils.request_validation import parse_json_request, parse_payload

auth_bp = Blueprint("auth", __name__)


def _uploaded_document(role: str) -> FileStorage | None:
    """Return the validated document attached for ``role``, if any."""

    model = PROFILE_MODELS.get(role)
    if model is None or model.UPLOAD_FIELD is None:
        return None

    file = request.files.get(model.UPLOAD_FIELD)
    if not isinstance(file, FileStorage) or not (file.filename or "").strip():
        return None

    get_services().uploads.validate(file, allow_documents=True)
    return file


@auth_bp.route("/signup/<role>", methods=["POST"])
def signup(role: str) -> tuple:
    """Create an account and its role profile, then return a session token."""
    role = role.strip().lower()
    payload = parse_payload(request)
    document = _uploaded_document(role)

    services = get_services()
    provisioned = services.provisioning.register(
        role,
        credentials=payload,
        attributes=payload,
        access_code=payload.get("accessCode") or payload.get("access_code"),
        document=document,
    )
    session = services.sessions.issue(provisioned.account, provisioned.profile)
    current_app.logger.info("Signed up %s account %s", role, provisioned.account.id)

    return (
        jsonify({"token": session.token, "user": session.user}),
        HTTPStatus.CREATED,
    )


def _login(use_role: bool) -> tuple:
    payload = parse_json_request(request)
    email = payload.get("email")
    password = payload.get("password")

    if not email or password is None or password == "":
        raise BadRequest("Email and password are required.")

    role = None
    if use_role:
        role = payload.get("role") or payload.get("userType")
    session = get_services().sessions.authenticate(email, password, role)
    return (
        jsonify(
            {
                "message": "Login successful",
                "token": session.token,
                "user": session.user,
            }
        ),
        HTTPStatus.OK,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate against the account registered under the requested role."""
    return _login(use_role=True)


@auth_bp.route("/signin", methods=["POST"])
def signin() -> tuple:
    """Legacy login: the stored role of the account selects the profile."""
    return _login(use_role=False)


@auth_bp.route("/donors", methods=["GET"])
@jwt_required()
def list_donors():
    """Return the donor directory, newest accounts first."""

    require_role("admin")
    donors = get_services().store.list_profiles("donor")
    return jsonify(
        [
            {
                "id": donor.account.id,
                "email": donor.account.email,
                "fullName": donor.full_name,
                "phone": donor.phone,
                "taxId": donor.tax_id,
                "createdAt": donor.account.created_at.isoformat()
                if donor.account.created_at
                else None,
            }
            for donor in donors
        ]
    )
