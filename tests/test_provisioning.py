"""Tests for creating accounts together with their role profiles."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from models import Account, CampaignerProfile, NgoProfile, PROFILE_MODELS, db
from services.errors import (
    AuthorizationError,
    ConflictError,
    PersistenceError,
    ValidationError,
)

from conftest import ADMIN_CODE

DONOR = {"fullName": "Jane Doe", "phone": "555", "panCard": "ABCDE1234F"}
NGO = {
    "ngoName": "Helping Hands",
    "phone": "555-0100",
    "state": "Karnataka",
    "city": "Bengaluru",
    "website": "https://helping.example",
    "registrationNumber": "REG-42",
    "panTan": "PAN-TAN-1",
}
CAMPAIGNER = {
    "fullName": "Sam Rivera",
    "phone": "555-0101",
    "city": "Pune",
    "state": "Maharashtra",
    "panNumber": "PAN-77",
    "idType": "passport",
}
ATTRIBUTES = {"donor": DONOR, "ngo": NGO, "campaigner": CAMPAIGNER, "admin": {}}


def _creds(email: str, password: str = "s3cret-pass") -> dict:
    return {"email": email, "password": password}


def _row_counts() -> dict[str, int]:
    counts = {"users": db.session.query(Account).count()}
    for role, model in PROFILE_MODELS.items():
        counts[role] = db.session.query(model).count()
    return counts


def _pdf(name: str = "certificate.pdf") -> FileStorage:
    return FileStorage(
        stream=BytesIO(b"%PDF-1.4 test"), filename=name, content_type="application/pdf"
    )


@pytest.mark.parametrize("role", ["donor", "ngo", "campaigner", "admin"])
def test_register_creates_account_and_matching_profile(services, role):
    code = ADMIN_CODE if role == "admin" else None

    account, profile = services.provisioning.register(
        role, _creds(f"{role}@example.com"), ATTRIBUTES[role], access_code=code
    )

    assert account.id is not None
    assert account.role == role
    assert isinstance(profile, PROFILE_MODELS[role])
    assert profile.user_id == account.id
    assert account.profile is profile
    counts = _row_counts()
    assert counts["users"] == 1
    assert counts[role] == 1
    assert sum(counts[other] for other in PROFILE_MODELS if other != role) == 0


def test_password_is_hashed(services):
    account, _ = services.provisioning.register(
        "donor", _creds("hash@example.com", "plain-text"), DONOR
    )

    assert account.password_hash != "plain-text"
    assert account.check_password("plain-text")


def test_email_is_normalized(services):
    account, _ = services.provisioning.register(
        "donor", _creds("  Mixed.Case@Example.COM "), DONOR
    )

    assert account.email == "mixed.case@example.com"


@pytest.mark.parametrize("second_role", ["donor", "ngo", "campaigner", "admin"])
def test_duplicate_email_conflicts_across_roles(services, second_role):
    services.provisioning.register("donor", _creds("dup@example.com"), DONOR)
    before = _row_counts()

    with pytest.raises(ConflictError):
        services.provisioning.register(
            second_role,
            _creds("DUP@example.com"),
            ATTRIBUTES[second_role],
            access_code=ADMIN_CODE,
        )

    assert _row_counts() == before


def test_unique_constraint_decides_when_precheck_misses(services, monkeypatch):
    """A signup that slips past the lookup still loses on the unique constraint."""

    services.provisioning.register("donor", _creds("race@example.com"), DONOR)
    store = services.store
    real_lookup = store.find_account_by_email
    calls = {"count": 0}

    def stale_lookup(email):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_lookup(email)

    monkeypatch.setattr(store, "find_account_by_email", stale_lookup)

    with pytest.raises(ConflictError):
        services.provisioning.register("ngo", _creds("race@example.com"), NGO)

    assert _row_counts()["users"] == 1
    assert _row_counts()["ngo"] == 0


def test_profile_failure_leaves_no_orphan_account(services, monkeypatch):
    def failing_insert(account, role, attrs):
        assert account.id is not None
        raise SQLAlchemyError("profile insert failed")

    monkeypatch.setattr(services.store, "insert_profile", failing_insert)

    with pytest.raises(PersistenceError):
        services.provisioning.register("donor", _creds("orphan@example.com"), DONOR)

    assert _row_counts()["users"] == 0
    assert services.store.find_account_by_email("orphan@example.com") is None


def test_wrong_admin_code_is_rejected_and_persists_nothing(services):
    with pytest.raises(AuthorizationError):
        services.provisioning.register(
            "admin", _creds("boss@example.com"), {}, access_code="WRONG"
        )

    assert _row_counts()["users"] == 0
    assert _row_counts()["admin"] == 0


def test_missing_admin_code_is_rejected(services):
    with pytest.raises(AuthorizationError):
        services.provisioning.register("admin", _creds("boss@example.com"), {})


def test_admin_profile_does_not_keep_the_code_in_clear(services):
    _, profile = services.provisioning.register(
        "admin", _creds("boss@example.com"), {"enable2FA": "true"}, access_code=ADMIN_CODE
    )

    assert profile.two_factor_enabled is True
    assert profile.access_code != ADMIN_CODE
    assert "accessCode" not in profile.snapshot()


def test_unknown_role_is_a_validation_error(services):
    with pytest.raises(ValidationError):
        services.provisioning.register("volunteer", _creds("v@example.com"), {})


@pytest.mark.parametrize(
    "credentials",
    [
        {"email": "", "password": "pw"},
        {"email": "user@example.com", "password": ""},
        {"email": "not-an-email", "password": "pw"},
    ],
)
def test_invalid_credentials_input(services, credentials):
    with pytest.raises(ValidationError):
        services.provisioning.register("donor", credentials, DONOR)

    assert _row_counts()["users"] == 0


def test_campaigner_missing_phone_names_the_field(services):
    attributes = {key: value for key, value in CAMPAIGNER.items() if key != "phone"}

    with pytest.raises(ValidationError) as excinfo:
        services.provisioning.register(
            "campaigner", _creds("camp@example.com"), attributes
        )

    assert "phone" in excinfo.value.detail
    assert _row_counts()["users"] == 0


def test_snake_case_attributes_are_accepted(services):
    _, profile = services.provisioning.register(
        "ngo",
        _creds("snake@example.com"),
        {
            "org_name": "Snake Org",
            "state": "Goa",
            "city": "Panaji",
            "registration_number": "R-1",
        },
    )

    assert profile.org_name == "Snake Org"
    assert profile.website is None


def test_new_ngo_and_campaigner_are_unapproved(services):
    _, ngo = services.provisioning.register("ngo", _creds("ngo@example.com"), NGO)
    _, campaigner = services.provisioning.register(
        "campaigner", _creds("camp@example.com"), CAMPAIGNER
    )

    assert ngo.is_approved is False
    assert campaigner.is_approved is False


def test_document_reference_is_recorded(app, services):
    _, profile = services.provisioning.register(
        "ngo", _creds("docs@example.com"), NGO, document=_pdf()
    )

    assert profile.certificate_ref.startswith("certificate-")
    assert profile.certificate_ref.endswith(".pdf")
    stored = Path(app.config["UPLOAD_DIR"]) / profile.certificate_ref
    assert stored.read_bytes() == b"%PDF-1.4 test"


def test_document_is_removed_when_signup_fails(app, services, monkeypatch):
    def failing_insert(account, role, attrs):
        raise SQLAlchemyError("profile insert failed")

    monkeypatch.setattr(services.store, "insert_profile", failing_insert)

    with pytest.raises(PersistenceError):
        services.provisioning.register(
            "campaigner",
            _creds("docs@example.com"),
            CAMPAIGNER,
            document=_pdf("govt-id.pdf"),
        )

    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []


def test_donor_rejects_document(services):
    with pytest.raises(ValidationError):
        services.provisioning.register(
            "donor", _creds("d@example.com"), DONOR, document=_pdf()
        )


def test_approval_mutators(services):
    ngo_account, _ = services.provisioning.register(
        "ngo", _creds("ngo@example.com"), NGO
    )
    campaigner_account, _ = services.provisioning.register(
        "campaigner", _creds("camp@example.com"), CAMPAIGNER
    )

    services.store.set_ngo_approval(ngo_account.id, True)
    services.store.set_campaigner_approval(campaigner_account.id, True)

    assert db.session.get(NgoProfile, 1).is_approved is True
    assert services.store.find_profile("campaigner", campaigner_account.id).is_approved
    assert services.store.set_ngo_approval(campaigner_account.id, True) is None
    assert db.session.query(CampaignerProfile).count() == 1


def test_deleting_account_cascades_to_profile(services):
    account, _ = services.provisioning.register("donor", _creds("gone@example.com"), DONOR)

    db.session.delete(account)
    db.session.commit()

    assert _row_counts() == {"users": 0, "donor": 0, "ngo": 0, "campaigner": 0, "admin": 0}


def test_document_is_removed_on_any_failure_inside_the_transaction(app, services, monkeypatch):
    def failing_insert(account, role, attrs):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(services.store, "insert_profile", failing_insert)

    with pytest.raises(RuntimeError):
        services.provisioning.register(
            "ngo", _creds("docs@example.com"), NGO, document=_pdf()
        )

    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []
    assert _row_counts()["users"] == 0
