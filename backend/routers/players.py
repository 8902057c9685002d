import csv
import io
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from database import get_db
from errors import ConflictError, NotFoundError, ValidationError
from models import Category, Game, Player
from player_import import import_players, parse_player_file, player_exists
from schemas import PlayerCreate, PlayerImportResponse, PlayerResponse

router = APIRouter()
logger = logging.getLogger(__name__)

EXPORT_HEADERS = ["Name", "CNIC", "Phone", "Email", "Ticket Price", "Category", "Game", "Registered At"]


def _filtered_players(db: Session, category: Optional[int], game: Optional[int]) -> List[Player]:
    query = db.query(Player).options(joinedload(Player.category), joinedload(Player.game))
    if category is not None:
        query = query.filter(Player.category_id == category)
    if game is not None:
        query = query.filter(Player.game_id == game)
    return query.order_by(Player.registered_at.desc(), Player.id.desc()).all()


@router.post("/players", status_code=status.HTTP_201_CREATED)
def create_player(payload: PlayerCreate, db: Session = Depends(get_db)):
    if not db.query(Category.id).filter(Category.id == payload.category_id).first():
        raise ValidationError("Category not found")
    game = db.query(Game).filter(Game.id == payload.game_id).first()
    if not game or game.category_id != payload.category_id:
        raise ValidationError("Game not found in category")
    if player_exists(db, payload.cnic, payload.category_id, payload.game_id):
        raise ConflictError("Player already registered for this game")

    player = Player(
        name=payload.name.strip(),
        cnic=payload.cnic.strip(),
        phone=payload.phone.strip(),
        email=str(payload.email) if payload.email else None,
        ticket_price=payload.ticket_price,
        category_id=payload.category_id,
        game_id=payload.game_id,
    )
    db.add(player)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Player already registered for this game")
    db.refresh(player)
    return {"success": True, "message": "Player created", "data": PlayerResponse.model_validate(player)}


@router.get("/players")
def list_players(
    category: Optional[int] = Query(default=None),
    game: Optional[int] = Query(default=None),
    db: Session = Depends(get_db)
):
    players = _filtered_players(db, category, game)
    return {"success": True, "data": [PlayerResponse.model_validate(p) for p in players]}


@router.post("/players/import", status_code=status.HTTP_201_CREATED, response_model=PlayerImportResponse)
def import_players_file(file: UploadFile = File(...), db: Session = Depends(get_db)):
    rows = parse_player_file(file.filename, file.file.read())
    count = import_players(db, rows)
    logger.info("Imported %s of %s player rows from %s", count, len(rows), file.filename)
    return PlayerImportResponse(message="Players imported successfully", count=count)


@router.get("/players/export")
def export_players(
    format: str = Query("csv", enum=["csv", "xlsx"]),
    category: Optional[int] = Query(default=None),
    game: Optional[int] = Query(default=None),
    db: Session = Depends(get_db)
):
    players = _filtered_players(db, category, game)
    rows = [
        [
            p.name,
            p.cnic,
            p.phone,
            p.email or "",
            p.ticket_price,
            p.category.title if p.category else "",
            p.game.title if p.game else "",
            p.registered_at.isoformat() if p.registered_at else "",
        ]
        for p in players
    ]

    if format == "xlsx":
        wb = Workbook()
        ws = wb.active
        ws.title = "Players"
        ws.append(EXPORT_HEADERS)
        for row in rows:
            ws.append(row)
        output = io.BytesIO()
        wb.save(output)
        output.seek(0)
        return StreamingResponse(
            output,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": "attachment; filename=players.xlsx"}
        )

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(rows)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=players.csv"}
    )


@router.get("/players/{player_id}")
def get_player(player_id: int, db: Session = Depends(get_db)):
    player = db.query(Player).filter(Player.id == player_id).first()
    if not player:
        raise NotFoundError("Player not found")
    return {"success": True, "data": PlayerResponse.model_validate(player)}


@router.delete("/players/{player_id}")
def delete_player(player_id: int, db: Session = Depends(get_db)):
    player = db.query(Player).filter(Player.id == player_id).first()
    if not player:
        raise NotFoundError("Player not found")
    db.delete(player)
    db.commit()
    return {"success": True, "message": "Player deleted"}
