from models import Account, AccountRole, Judge

REGISTER = {
    "name": "Ayesha",
    "email": "ayesha@example.com",
    "password": "secret123",
    "confirm_password": "secret123",
    "cnic": "4210112345671",
}


def test_register_login_me(client):
    registered = client.post("/auth/register", json=REGISTER)
    assert registered.status_code == 201
    assert registered.json()["user"]["role"] == "user"

    login = client.post("/auth/login", json={"email": "ayesha@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ayesha@example.com"


def test_register_rejects_duplicate_email(client):
    assert client.post("/auth/register", json=REGISTER).status_code == 201
    duplicate = client.post("/auth/register", json={**REGISTER, "cnic": "4210199999999"})
    assert duplicate.status_code == 403
    assert duplicate.json() == {"success": False, "message": "User already exists"}


def test_register_validates_input(client):
    mismatch = client.post("/auth/register", json={**REGISTER, "confirm_password": "other123"})
    assert mismatch.status_code == 400
    assert mismatch.json()["success"] is False

    admin = client.post("/auth/register", json={**REGISTER, "role": "admin"})
    assert admin.status_code == 403


def test_login_rejects_bad_credentials(client, make_account):
    make_account(email="user@example.com", password="secret123")
    assert client.post("/auth/login", json={"email": "user@example.com", "password": "wrong123"}).status_code == 403
    assert client.post("/auth/login", json={"email": "ghost@example.com", "password": "secret123"}).status_code == 403


def test_judge_login_requires_judge_row(client, db, make_account):
    make_account(email="judge@example.com", password="123456", role=AccountRole.JUDGE)
    assert client.post("/auth/judge-login", json={"email": "judge@example.com", "password": "123456"}).status_code == 403

    db.add(Judge(name="Judge", email="judge@example.com", contact="03001234567"))
    db.commit()
    assert client.post("/auth/judge-login", json={"email": "judge@example.com", "password": "123456"}).status_code == 200


def test_judge_login_rejects_regular_account(client, make_account):
    make_account(email="user@example.com", password="secret123")
    response = client.post("/auth/judge-login", json={"email": "user@example.com", "password": "secret123"})
    assert response.status_code == 403


def test_logout_revokes_token(client, make_account):
    make_account(email="user@example.com", password="secret123")
    token = client.post("/auth/login", json={"email": "user@example.com", "password": "secret123"}).json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert client.post("/auth/logout", headers=headers).status_code == 200
    after = client.get("/auth/me", headers=headers)
    assert after.status_code == 401
    assert after.json()["success"] is False


def test_refresh_issues_access_token(client, make_account):
    make_account(email="user@example.com", password="secret123")
    tokens = client.post("/auth/login", json={"email": "user@example.com", "password": "secret123"}).json()

    refreshed = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]

    wrong_type = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert wrong_type.status_code == 401


def test_google_sign_in_creates_account_once(client, db, monkeypatch):
    claims = {"email": "g@example.com", "sub": "google-123", "name": "Gee", "email_verified": "true"}
    monkeypatch.setattr("routers.auth_account._verify_google_id_token", lambda token_id: claims)

    first = client.post("/auth/google", json={"token_id": "abc"})
    second = client.post("/auth/google", json={"token_id": "abc"})

    assert first.status_code == 200
    assert second.status_code == 200
    accounts = db.query(Account).filter(Account.email == "g@example.com").all()
    assert len(accounts) == 1
    assert accounts[0].hashed_password is None
    assert accounts[0].google_id == "google-123"


def test_accounts_require_admin(client, make_account, admin_headers):
    user = make_account(email="user@example.com", password="secret123")
    user_token = client.post("/auth/login", json={"email": "user@example.com", "password": "secret123"}).json()["access_token"]

    assert client.get("/accounts").status_code in (401, 403)
    assert client.get("/accounts", headers={"Authorization": f"Bearer {user_token}"}).status_code == 403

    listed = client.get("/accounts", headers=admin_headers)
    assert listed.status_code == 200
    assert len(listed.json()["data"]) == 2

    updated = client.put(f"/accounts/{user.id}", json={"role": "lead", "position": "E-Games"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["data"]["role"] == "lead"

    assert client.delete(f"/accounts/{user.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/accounts/{user.id}", headers=admin_headers).status_code == 404


def test_google_sign_in_follows_changed_email(client, db, monkeypatch):
    claims = {"email": "old@example.com", "sub": "g-1", "name": "Gee", "email_verified": "true"}
    monkeypatch.setattr("routers.auth_account._verify_google_id_token", lambda token_id: dict(claims))

    first = client.post("/auth/google", json={"token_id": "abc"})
    assert first.status_code == 200

    claims["email"] = "new@example.com"
    second = client.post("/auth/google", json={"token_id": "abc"})
    assert second.status_code == 200
    assert second.json()["user"]["email"] == "new@example.com"
    assert second.json()["user"]["id"] == first.json()["user"]["id"]

    accounts = db.query(Account).filter(Account.google_id == "g-1").all()
    assert [a.email for a in accounts] == ["new@example.com"]


def test_google_sign_in_rejects_email_taken_by_other_account(client, make_account, monkeypatch):
    make_account(email="taken@example.com")
    claims = {"email": "old@example.com", "sub": "g-2", "name": "Gee", "email_verified": "true"}
    monkeypatch.setattr("routers.auth_account._verify_google_id_token", lambda token_id: dict(claims))
    assert client.post("/auth/google", json={"token_id": "abc"}).status_code == 200

    claims["email"] = "taken@example.com"
    response = client.post("/auth/google", json={"token_id": "abc"})
    assert response.status_code == 400
    assert response.json()["success"] is False
