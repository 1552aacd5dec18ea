"""Campaigns blueprint with listing, CRUD, and soft delete."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import db
from models.account import Account
from models.campaign import ORGANIZER_TYPES, Campaign
from routes.access import require_role
from services.context import get_services
from storage.uploads import build_stored_name
from utils.request_validation import parse_payload

campaigns_bp = Blueprint("campaigns", __name__)

CAMPAIGN_FIELDS = ("title", "description", "category", "location")
REQUIRED_FIELDS = ("title", "description", "targetAmount", "category")
IMAGE_URL_PREFIX = "/uploads/"
IMAGE_PREFIX = "image"


def _parse_date(value, field: str, errors: list[str]) -> date | None:
    if value in (None, ""):
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        errors.append(f"{field} must be an ISO 8601 date")
        return None


def _validate_campaign_payload(data: dict, partial: bool = False):
    errors = []

    for field in REQUIRED_FIELDS:
        if partial and field not in data:
            continue
        value = data.get(field)
        if value is None or not str(value).strip():
            errors.append(f"{field} is required")

    target = data.get("targetAmount")
    target_decimal = None
    if target not in (None, ""):
        try:
            target_decimal = Decimal(str(target))
            if not target_decimal.is_finite():
                raise InvalidOperation
        except (InvalidOperation, TypeError):
            target_decimal = None
            errors.append("targetAmount must be numeric")
        else:
            if target_decimal <= 0:
                errors.append("targetAmount must be positive")

    start_date = _parse_date(data.get("startDate"), "startDate", errors)
    end_date = _parse_date(data.get("endDate"), "endDate", errors)
    if start_date and end_date and end_date < start_date:
        errors.append("endDate must not precede startDate")

    return errors, target_decimal, start_date, end_date


def _store_image() -> str | None:
    """Validate and store an uploaded campaign image, returning its URL."""

    file = request.files.get("image")
    if not isinstance(file, FileStorage) or not (file.filename or "").strip():
        return None

    services = get_services()
    services.uploads.validate(file, allow_documents=False)
    reference = services.storage.save(file, build_stored_name(IMAGE_PREFIX, file.filename))
    return f"{IMAGE_URL_PREFIX}{reference}"


def _commit_or_discard(image_url: str | None) -> None:
    """Commit the session; a stored image whose commit failed is deleted."""

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        if image_url is not None:
            reference = image_url.removeprefix(IMAGE_URL_PREFIX)
            try:
                get_services().storage.delete(reference)
            except OSError:
                current_app.logger.warning("Could not remove orphaned upload %s", reference)
        raise


def _get_active_campaign_or_404(campaign_id: int) -> Campaign:
    campaign = db.session.get(Campaign, campaign_id)
    if campaign is None or not campaign.is_active:
        raise NotFound("Campaign not found.")
    return campaign


def _get_owned_campaign(campaign_id: int, account: Account, action: str) -> Campaign:
    campaign = db.session.get(Campaign, campaign_id)
    if (
        campaign is None
        or campaign.organizer_id != account.id
        or campaign.organizer_type != account.role
    ):
        raise Forbidden(f"Not authorized to {action} this campaign.")
    return campaign


@campaigns_bp.route("", methods=["POST"])
@jwt_required()
def create_campaign():
    """Create a campaign. NGOs and campaigners only."""

    account = require_role(*ORGANIZER_TYPES)

    data = parse_payload(request)
    errors, target_amount, start_date, end_date = _validate_campaign_payload(data)
    if errors:
        raise BadRequest("; ".join(errors))

    image_url = _store_image()
    campaign = Campaign(
        title=data.get("title"),
        description=data.get("description"),
        target_amount=target_amount,
        category=data.get("category"),
        location=data.get("location"),
        image_url=image_url,
        start_date=start_date,
        end_date=end_date,
        organizer_id=account.id,
        organizer_type=account.role,
    )
    db.session.add(campaign)
    _commit_or_discard(image_url)
    current_app.logger.info("Campaign %s created by account %s", campaign.id, account.id)

    return jsonify({"id": campaign.id, "message": "Campaign created successfully"}), 201


@campaigns_bp.route("", methods=["GET"])
def list_campaigns():
    """Return active campaigns, newest first."""

    campaigns = (
        Campaign.query.filter(Campaign.is_active.is_(True))
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        .all()
    )
    return jsonify([campaign.to_dict() for campaign in campaigns])


@campaigns_bp.route("/<int:campaign_id>", methods=["GET"])
def get_campaign(campaign_id: int):
    return jsonify(_get_active_campaign_or_404(campaign_id).to_dict())


@campaigns_bp.route("/<int:campaign_id>", methods=["PUT"])
@jwt_required()
def update_campaign(campaign_id: int):
    account = require_role(*ORGANIZER_TYPES)
    campaign = _get_owned_campaign(campaign_id, account, "update")

    data = parse_payload(request)
    errors, target_amount, start_date, end_date = _validate_campaign_payload(
        data, partial=True
    )
    if errors:
        raise BadRequest("; ".join(errors))

    for field in CAMPAIGN_FIELDS:
        if field in data and data[field] is not None:
            setattr(campaign, field, data[field])

    if target_amount is not None:
        campaign.target_amount = target_amount
    if start_date is not None:
        campaign.start_date = start_date
    if end_date is not None:
        campaign.end_date = end_date

    image_url = _store_image()
    if image_url is not None:
        campaign.image_url = image_url

    _commit_or_discard(image_url)
    return jsonify({"message": "Campaign updated successfully"})


@campaigns_bp.route("/<int:campaign_id>", methods=["DELETE"])
@jwt_required()
def delete_campaign(campaign_id: int):
    """Soft delete: the campaign stays stored but is no longer listed."""

    account = require_role(*ORGANIZER_TYPES)
    campaign = _get_owned_campaign(campaign_id, account, "delete")

    campaign.is_active = False
    db.session.commit()
    return jsonify({"message": "Campaign deleted successfully"})
