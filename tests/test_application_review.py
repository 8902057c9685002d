import pytest

from application_review import promote_applicant_account, review_application
from errors import InvalidStatusError, NotFoundError
from models import Account, AccountRole, Application, ApplicationStatus


def _application(db, email="applicant@example.com", post="E-Games", subpost="Lead"):
    application = Application(
        name="Applicant",
        roll_number="21-CS-001",
        contact_number="03001234567",
        email=email,
        post=post,
        subpost=subpost,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


def test_accept_promotes_matching_account(db, make_account):
    account = make_account(email="applicant@example.com")
    application = _application(db)

    updated = review_application(db, application.id, "Accepted")

    assert updated.status == ApplicationStatus.ACCEPTED
    db.refresh(account)
    assert account.is_participant is True
    assert account.role == AccountRole.PARTICIPANT
    assert account.position == "E-Games"
    assert account.subpost == "Lead"


def test_accept_without_account_still_succeeds(db):
    application = _application(db, email="nobody@example.com")

    updated = review_application(db, application.id, "Accepted")

    assert updated.status == ApplicationStatus.ACCEPTED
    assert db.query(Account).count() == 0


def test_accept_without_email_skips_promotion(db):
    application = _application(db, email=None)
    assert promote_applicant_account(db, application) is None
    assert review_application(db, application.id, "Accepted").status == ApplicationStatus.ACCEPTED


def test_reject_leaves_account_untouched(db, make_account):
    account = make_account(email="applicant@example.com")
    application = _application(db)

    review_application(db, application.id, "Rejected")

    db.refresh(account)
    assert account.is_participant is False
    assert account.role == AccountRole.USER


def test_promotion_failure_does_not_fail_review(db, make_account, monkeypatch):
    make_account(email="applicant@example.com")
    application = _application(db)

    def boom(session, app):
        raise RuntimeError("account store down")

    monkeypatch.setattr("application_review.promote_applicant_account", boom)

    updated = review_application(db, application.id, "Accepted")
    assert updated.status == ApplicationStatus.ACCEPTED


def test_invalid_status_is_checked_before_lookup(db):
    with pytest.raises(InvalidStatusError):
        review_application(db, 9999, "Maybe")


def test_unknown_application_raises_not_found(db):
    with pytest.raises(NotFoundError):
        review_application(db, 9999, "Accepted")


def test_transitions_are_not_restricted(db, make_account):
    make_account(email="applicant@example.com")
    application = _application(db)

    review_application(db, application.id, "Rejected")
    assert review_application(db, application.id, "Accepted").status == ApplicationStatus.ACCEPTED
    assert review_application(db, application.id, "Pending").status == ApplicationStatus.PENDING


def test_review_endpoint_envelopes(client, db, make_account):
    make_account(email="applicant@example.com")
    application = _application(db)

    ok = client.put(f"/smecpost/{application.id}", json={"status": "Accepted"})
    assert ok.status_code == 200
    assert ok.json()["message"] == "Status updated"
    assert ok.json()["data"]["status"] == "Accepted"

    bad = client.put(f"/smecpost/{application.id}", json={"status": "Unknown"})
    assert bad.status_code == 400
    assert bad.json() == {"success": False, "message": "Invalid status value"}

    missing = client.put("/smecpost/4242", json={"status": "Accepted"})
    assert missing.status_code == 404
    assert missing.json()["success"] is False


def test_submit_and_lookup_by_email(client):
    payload = {
        "name": "Sara Khan",
        "roll_number": "21-CS-044",
        "phone": "0300-1234567",
        "email": "sara@example.com",
        "position": "Geek Games",
    }
    created = client.post("/smecpost", json=payload)
    assert created.status_code == 201
    assert created.json()["data"]["status"] == "Pending"
    assert created.json()["data"]["subpost"] == "Lead"

    second = client.post("/smecpost", json={**payload, "position": "E-Games", "subpost": "Co-Lead"})
    assert second.status_code == 201

    found = client.get("/smecpost/application", params={"email": "sara@example.com"})
    assert found.status_code == 200
    posts = [item["post"] for item in found.json()["data"]]
    assert posts == ["E-Games", "Geek Games"]

    assert client.get("/smecpost/application").status_code == 400
    assert client.get("/smecpost/application", params={"email": "not-an-email"}).status_code == 400


def test_leadership_list_groups_by_subpost(client, db):
    _application(db, email="a@example.com", post="E-Games", subpost="Lead")
    _application(db, email="b@example.com", post="General Games", subpost="Co-Lead")
    _application(db, email="c@example.com", post="Photography", subpost="Lead")

    response = client.get("/users/accepted")
    assert response.status_code == 200
    data = response.json()["data"]
    assert [row["email"] for row in data["lead"]] == ["a@example.com"]
    assert [row["email"] for row in data["co_lead"]] == ["b@example.com"]


def test_invalid_status_leaves_record_unchanged(db):
    application = _application(db)
    with pytest.raises(InvalidStatusError):
        review_application(db, application.id, "bogus")
    db.refresh(application)
    assert application.status == ApplicationStatus.PENDING


def test_accept_promotes_account_registered_with_mixed_case_email(client, db):
    registered = client.post(
        "/auth/register",
        json={
            "name": "Ali Khan",
            "email": "Ali.Khan@Example.com",
            "password": "secret123",
            "confirm_password": "secret123",
            "cnic": "4210112345671",
        },
    )
    assert registered.status_code == 201

    submitted = client.post(
        "/smecpost",
        json={
            "name": "Ali Khan",
            "roll_number": "21-CS-045",
            "phone": "03001234567",
            "email": "Ali.Khan@Example.com",
            "position": "E-Games",
        },
    )
    assert submitted.status_code == 201
    application_id = submitted.json()["data"]["id"]

    reviewed = client.put(f"/smecpost/{application_id}", json={"status": "Accepted"})
    assert reviewed.status_code == 200

    account = db.query(Account).filter(Account.email == "ali.khan@example.com").one()
    assert account.is_participant is True
    assert account.role == AccountRole.PARTICIPANT
    assert account.position == "E-Games"

    found = client.get("/smecpost/application", params={"email": "ALI.KHAN@example.com"})
    assert [item["id"] for item in found.json()["data"]] == [application_id]
