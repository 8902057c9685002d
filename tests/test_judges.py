from models import Account, AccountRole, Category, Game


def _game(db, title="Chess"):
    category = Category(title="Indoor")
    db.add(category)
    db.commit()
    game = Game(
        title=title,
        category_id=category.id,
        description="Rapid",
        date="2026-03-02",
        time="14:00",
        lead="Usman",
        co_lead="Bilal",
        price=200,
        player=16,
        venue="Hall B",
    )
    db.add(game)
    db.commit()
    return game


def _sent(monkeypatch):
    sent = []
    monkeypatch.setattr(
        "routers.judges.send_notification",
        lambda to_email, subject, html, text: sent.append((to_email, subject)) or True,
    )
    return sent


def test_create_judge_creates_account_and_notifies(client, db, monkeypatch):
    sent = _sent(monkeypatch)
    game = _game(db)

    response = client.post(
        "/judges",
        json={"name": "Judge Judy", "email": "judy@example.com", "contact": "03001234567", "assigned_games": [game.id]},
    )
    assert response.status_code == 201
    judge = response.json()["data"]
    assert judge["assignments"][0]["game"]["title"] == "Chess"
    assert judge["assignments"][0]["status"] == "pending"

    account = db.query(Account).filter(Account.email == "judy@example.com").first()
    assert account.role == AccountRole.JUDGE
    assert judge["account_id"] == account.id
    assert sent == [("judy@example.com", "Judge Assignment Notification")]


def test_create_judge_rejects_duplicates_and_multiple_games(client, db, monkeypatch, make_account):
    _sent(monkeypatch)
    first = _game(db, "Chess")
    second = _game(db, "Ludo")
    make_account(email="taken@example.com")

    assert client.post(
        "/judges",
        json={"name": "Taken", "email": "taken@example.com", "contact": "03001234567"},
    ).status_code == 400

    assert client.post(
        "/judges",
        json={"name": "Busy", "email": "busy@example.com", "contact": "03001234567", "assigned_games": [first.id, second.id]},
    ).status_code == 400

    assert client.post("/judges", json={"name": "Once", "email": "once@example.com", "contact": "03001234567"}).status_code == 201
    assert client.post("/judges", json={"name": "Twice", "email": "once@example.com", "contact": "03001234567"}).status_code == 400


def test_update_and_delete_judge_sync_account(client, db, monkeypatch):
    _sent(monkeypatch)
    judge = client.post(
        "/judges",
        json={"name": "Old Name", "email": "old@example.com", "contact": "03001234567"},
    ).json()["data"]

    updated = client.put(f"/judges/{judge['id']}", json={"name": "New Name", "email": "new@example.com"})
    assert updated.status_code == 200
    account = db.query(Account).filter(Account.id == judge["account_id"]).first()
    assert account.name == "New Name"
    assert account.email == "new@example.com"

    assert client.delete(f"/judges/{judge['id']}").status_code == 200
    db.expire_all()
    assert db.query(Account).filter(Account.id == judge["account_id"]).first() is None
    assert client.get(f"/judges/{judge['id']}").status_code == 404


def test_judge_panel_announces_result(client, db, monkeypatch):
    _sent(monkeypatch)
    game = _game(db)
    other = _game(db, "Ludo")
    client.post(
        "/judges",
        json={"name": "Judge", "email": "judge@example.com", "contact": "03001234567", "assigned_games": [game.id]},
    )
    token = client.post("/auth/judge-login", json={"email": "judge@example.com", "password": "123456"}).json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    assigned = client.get("/judge-panel/assigned-games", headers=headers)
    assert assigned.status_code == 200
    assert assigned.json()["data"][0]["game"]["title"] == "Chess"

    result = client.post(
        f"/judge-panel/announce-result/{game.id}",
        json={"winner": "Team A", "runner_up": "Team B"},
        headers=headers,
    )
    assert result.status_code == 200
    assert result.json()["data"]["status"] == "completed"
    assert result.json()["data"]["winner"] == "Team A"

    unassigned = client.post(f"/judge-panel/announce-result/{other.id}", json={"winner": "X"}, headers=headers)
    assert unassigned.status_code == 404


def test_judge_panel_rejects_non_judges(client, make_account):
    make_account(email="user@example.com", password="secret123")
    token = client.post("/auth/login", json={"email": "user@example.com", "password": "secret123"}).json()["access_token"]
    response = client.get("/judge-panel/assigned-games", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403
