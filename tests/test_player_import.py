import io

import pytest
from openpyxl import Workbook

from errors import ImportParseError
from models import Category, Game, Player
from player_import import import_players, parse_player_file

HEADER = "name,cnic,phone,email,ticketPrice,category,game\n"


def _seed(db):
    sports = Category(title="Sports")
    db.add(sports)
    db.commit()
    cricket = Game(
        title="Cricket",
        category_id=sports.id,
        description="Tape ball",
        date="2026-03-01",
        time="10:00",
        lead="Ali",
        co_lead="Hamza",
        price=500,
        player=22,
        venue="Main ground",
    )
    db.add(cricket)
    db.commit()
    return sports, cricket


def test_parse_csv_rows():
    content = (HEADER + "Ali,4210112345671,03001112222,ali@example.com,500,Sports,Cricket\n").encode()
    rows = parse_player_file("players.csv", content)
    assert len(rows) == 1
    assert rows[0]["ticket_price"] == 500.0
    assert rows[0]["category"] == "Sports"
    assert rows[0]["row"] == 2


def test_parse_skips_blank_lines_and_reads_bom():
    content = ("\ufeff" + HEADER + "Ali,1,2,,500,Sports,Cricket\n,,,,,,\n").encode("utf-8")
    rows = parse_player_file("players.csv", content)
    assert [r["name"] for r in rows] == ["Ali"]
    assert rows[0]["email"] is None


def test_parse_rejects_non_numeric_ticket_price():
    content = (HEADER + "Ali,1,2,,free,Sports,Cricket\n").encode()
    with pytest.raises(ImportParseError) as excinfo:
        parse_player_file("players.csv", content)
    assert "Row 2" in excinfo.value.detail


def test_parse_rejects_missing_columns_and_empty_upload():
    with pytest.raises(ImportParseError):
        parse_player_file("players.csv", b"name,cnic\nAli,1\n")
    with pytest.raises(ImportParseError):
        parse_player_file("players.csv", b"")


def test_parse_xlsx_normalises_numeric_cells():
    wb = Workbook()
    ws = wb.active
    ws.append(["Name", "CNIC", "Phone", "Email", "ticketPrice", "Category", "Game"])
    ws.append(["Ali", 4210112345671, 3001112222, None, 750, "Sports", "Cricket"])
    buffer = io.BytesIO()
    wb.save(buffer)

    rows = parse_player_file("players.xlsx", buffer.getvalue())
    assert rows[0]["cnic"] == "4210112345671"
    assert rows[0]["ticket_price"] == 750.0


def test_import_inserts_and_skips(db):
    sports, cricket = _seed(db)
    db.add(Player(name="Old", cnic="111", phone="1", ticket_price=500, category_id=sports.id, game_id=cricket.id))
    db.commit()

    rows = parse_player_file("players.csv", (
        HEADER
        + "New,222,0300,,500, sports ,CRICKET\n"
        + "Dup,111,0300,,500,Sports,Cricket\n"
        + "Lost,333,0300,,500,Music,Cricket\n"
        + "Stray,444,0300,,500,Sports,Chess\n"
        + ",555,0300,,500,Sports,Cricket\n"
        + "Again,222,0300,,500,Sports,Cricket\n"
    ).encode())

    assert import_players(db, rows) == 1
    assert db.query(Player).filter(Player.cnic == "222").count() == 1
    assert db.query(Player).count() == 2


def test_import_is_idempotent(db):
    _seed(db)
    rows = parse_player_file("players.csv", (HEADER + "Ali,999,0300,,500,Sports,Cricket\n").encode())
    assert import_players(db, rows) == 1
    assert import_players(db, rows) == 0
    assert db.query(Player).count() == 1


def test_import_endpoint(client, db):
    _seed(db)
    content = (HEADER + "Ali,999,0300,,500,Sports,Cricket\n").encode()

    response = client.post("/players/import", files={"file": ("players.csv", content, "text/csv")})
    assert response.status_code == 201
    assert response.json() == {"message": "Players imported successfully", "count": 1}

    bad = client.post(
        "/players/import",
        files={"file": ("players.csv", (HEADER + "Ali,1,2,,abc,Sports,Cricket\n").encode(), "text/csv")},
    )
    assert bad.status_code == 400
    assert bad.json()["success"] is False

    listed = client.get("/players")
    assert listed.status_code == 200
    player = listed.json()["data"][0]
    assert player["category"]["title"] == "Sports"
    assert player["game"]["title"] == "Cricket"


def test_create_player_rejects_duplicate(client, db):
    sports, cricket = _seed(db)
    payload = {
        "name": "Ali",
        "cnic": "4210112345671",
        "phone": "03001112222",
        "ticket_price": 500,
        "category_id": sports.id,
        "game_id": cricket.id,
    }
    assert client.post("/players", json=payload).status_code == 201
    duplicate = client.post("/players", json=payload)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Player already registered for this game"


def test_export_csv(client, db):
    sports, cricket = _seed(db)
    db.add(Player(name="Ali", cnic="111", phone="1", ticket_price=500, category_id=sports.id, game_id=cricket.id))
    db.commit()

    response = client.get("/players/export", params={"format": "csv"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("Name,CNIC")
    assert "Ali" in lines[1]


def test_duplicate_rows_in_one_file_insert_once(db):
    chess = Category(title="Chess")
    db.add(chess)
    db.commit()
    indoor = Game(
        title="Indoor Games",
        category_id=chess.id,
        description="Boards",
        date="2026-03-05",
        time="09:00",
        lead="Zain",
        co_lead="Omar",
        price=100,
        player=32,
        venue="Library",
    )
    db.add(indoor)
    db.commit()

    line = "Ali,12345,03001234567,,100,Chess,Indoor Games\n"
    rows = parse_player_file("players.csv", (HEADER + line + line).encode())

    assert import_players(db, rows) == 1
    player = db.query(Player).one()
    assert (player.cnic, player.category_id, player.game_id) == ("12345", chess.id, indoor.id)


def test_parse_xlsx_closes_workbook(monkeypatch):
    import player_import

    closed = []
    real_load_workbook = player_import.load_workbook

    def tracking_load_workbook(*args, **kwargs):
        wb = real_load_workbook(*args, **kwargs)
        real_close = wb.close

        def close():
            closed.append(True)
            real_close()

        wb.close = close
        return wb

    monkeypatch.setattr(player_import, "load_workbook", tracking_load_workbook)

    wb = Workbook()
    ws = wb.active
    ws.append(["name", "cnic", "phone", "ticketPrice", "category", "game"])
    ws.append(["Ali", "1", "2", 100, "Sports", "Cricket"])
    buffer = io.BytesIO()
    wb.save(buffer)
    assert len(parse_player_file("players.xlsx", buffer.getvalue())) == 1

    empty = Workbook()
    empty_buffer = io.BytesIO()
    empty.save(empty_buffer)
    with pytest.raises(ImportParseError):
        parse_player_file("players.xlsx", empty_buffer.getvalue())

    assert closed == [True, True]
