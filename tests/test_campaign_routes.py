"""Tests for campaign CRUD endpoints."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from flask.testing import FlaskClient
from sqlalchemy.exc import OperationalError

from models import Campaign, db

CAMPAIGN = {
    "title": "Help Local Food Bank",
    "description": "Support our local food bank to provide meals for families in need",
    "targetAmount": 10000,
    "category": "food",
    "location": "Bengaluru",
    "startDate": "2024-01-01",
    "endDate": "2024-06-30",
}


def _signup_ngo(client: FlaskClient, email: str = "ngo@example.com") -> dict:
    response = client.post(
        "/auth/signup/ngo",
        json={
            "ngoName": "Helping Hands",
            "email": email,
            "password": "NgoPass123",
            "state": "Karnataka",
            "city": "Bengaluru",
            "registrationNumber": "REG-42",
        },
    )
    assert response.status_code == 201
    return response.get_json()


def _headers(session: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {session['token']}"}


def test_create_requires_jwt(client: FlaskClient):
    response = client.post("/campaigns", json=CAMPAIGN)

    assert response.status_code == 401


def test_ngo_creates_and_lists_campaign(client: FlaskClient):
    ngo = _signup_ngo(client)

    created = client.post("/campaigns", json=CAMPAIGN, headers=_headers(ngo))
    assert created.status_code == 201
    campaign_id = created.get_json()["id"]

    listed = client.get("/campaigns")
    assert listed.status_code == 200
    campaigns = listed.get_json()
    assert [campaign["id"] for campaign in campaigns] == [campaign_id]
    assert campaigns[0]["organizer_name"] == "Helping Hands"
    assert campaigns[0]["organizer_type"] == "ngo"
    assert campaigns[0]["target_amount"] == 10000.0
    assert campaigns[0]["raised_amount"] == 0.0

    detail = client.get(f"/campaigns/{campaign_id}")
    assert detail.status_code == 200
    assert detail.get_json()["end_date"] == "2024-06-30"


def test_donor_cannot_create_campaign(client: FlaskClient):
    donor = client.post(
        "/auth/signup/donor",
        json={"fullName": "Jane", "email": "jane@example.com", "password": "pw"},
    ).get_json()

    response = client.post("/campaigns", json=CAMPAIGN, headers=_headers(donor))

    assert response.status_code == 403


def test_create_validates_payload(client: FlaskClient):
    ngo = _signup_ngo(client)

    response = client.post(
        "/campaigns",
        json={**CAMPAIGN, "targetAmount": "lots", "endDate": "2023-01-01"},
        headers=_headers(ngo),
    )

    assert response.status_code == 400
    assert "targetAmount must be numeric" in response.get_json()["detail"]


def test_create_with_image_upload(client: FlaskClient):
    ngo = _signup_ngo(client)
    data = {key: str(value) for key, value in CAMPAIGN.items()}
    data["image"] = (BytesIO(b"\x89PNG\r\n\x1a\nimage"), "banner.png")

    created = client.post(
        "/campaigns",
        data=data,
        headers=_headers(ngo),
        content_type="multipart/form-data",
    )
    assert created.status_code == 201

    campaign = client.get(f"/campaigns/{created.get_json()['id']}").get_json()
    assert campaign["image_url"].startswith("/uploads/image-")

    image = client.get(campaign["image_url"])
    assert image.status_code == 200
    assert image.data == b"\x89PNG\r\n\x1a\nimage"


def test_campaign_image_must_be_an_image(client: FlaskClient):
    ngo = _signup_ngo(client)
    data = {key: str(value) for key, value in CAMPAIGN.items()}
    data["image"] = (BytesIO(b"%PDF-1.4"), "flyer.pdf")

    response = client.post(
        "/campaigns",
        data=data,
        headers=_headers(ngo),
        content_type="multipart/form-data",
    )

    assert response.status_code == 400


def test_only_owner_can_update(client: FlaskClient):
    owner = _signup_ngo(client)
    other = _signup_ngo(client, "other@example.com")
    campaign_id = client.post(
        "/campaigns", json=CAMPAIGN, headers=_headers(owner)
    ).get_json()["id"]

    forbidden = client.put(
        f"/campaigns/{campaign_id}", json={"title": "Hijacked"}, headers=_headers(other)
    )
    assert forbidden.status_code == 403

    response = client.put(
        f"/campaigns/{campaign_id}",
        json={"title": "Bigger Food Bank", "targetAmount": "15000.50"},
        headers=_headers(owner),
    )
    assert response.status_code == 200

    campaign = client.get(f"/campaigns/{campaign_id}").get_json()
    assert campaign["title"] == "Bigger Food Bank"
    assert campaign["target_amount"] == 15000.5
    assert campaign["description"] == CAMPAIGN["description"]


def test_delete_is_soft(app, client: FlaskClient):
    owner = _signup_ngo(client)
    other = _signup_ngo(client, "other@example.com")
    campaign_id = client.post(
        "/campaigns", json=CAMPAIGN, headers=_headers(owner)
    ).get_json()["id"]

    assert (
        client.delete(f"/campaigns/{campaign_id}", headers=_headers(other)).status_code
        == 403
    )
    assert (
        client.delete(f"/campaigns/{campaign_id}", headers=_headers(owner)).status_code
        == 200
    )

    assert client.get("/campaigns").get_json() == []
    assert client.get(f"/campaigns/{campaign_id}").status_code == 404
    with app.app_context():
        assert Campaign.query.get(campaign_id).is_active is False


@pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity", "sNaN"])
def test_non_finite_target_amount_is_rejected(client: FlaskClient, amount):
    ngo = _signup_ngo(client)

    response = client.post(
        "/campaigns", json={**CAMPAIGN, "targetAmount": amount}, headers=_headers(ngo)
    )

    assert response.status_code == 400
    assert "targetAmount must be numeric" in response.get_json()["detail"]


def test_update_cannot_blank_required_fields(client: FlaskClient):
    owner = _signup_ngo(client)
    campaign_id = client.post(
        "/campaigns", json=CAMPAIGN, headers=_headers(owner)
    ).get_json()["id"]

    response = client.put(
        f"/campaigns/{campaign_id}",
        json={"title": "", "category": "  "},
        headers=_headers(owner),
    )

    assert response.status_code == 400
    detail = response.get_json()["detail"]
    assert "title is required" in detail
    assert "category is required" in detail

    campaign = client.get(f"/campaigns/{campaign_id}").get_json()
    assert campaign["title"] == CAMPAIGN["title"]
    assert campaign["category"] == CAMPAIGN["category"]


def test_image_is_removed_when_commit_fails(app, client: FlaskClient, monkeypatch):
    ngo = _signup_ngo(client)
    data = {key: str(value) for key, value in CAMPAIGN.items()}
    data["image"] = (BytesIO(b"\x89PNG\r\n\x1a\nimage"), "banner.png")

    def failing_commit():
        raise OperationalError("INSERT INTO campaigns", {}, Exception("disk full"))

    monkeypatch.setattr(db.session, "commit", failing_commit)

    response = client.post(
        "/campaigns",
        data=data,
        headers=_headers(ngo),
        content_type="multipart/form-data",
    )

    assert response.status_code == 500
    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []
