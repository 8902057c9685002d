import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from errors import ConflictError, NotFoundError, ValidationError
from models import Category, Game, JudgeAssignment, Player
from schemas import GameCreate, GameResponse, GameUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_game_or_404(db: Session, game_id: int) -> Game:
    game = db.query(Game).filter(Game.id == game_id).first()
    if not game:
        raise NotFoundError("Game not found")
    return game


def _ensure_category(db: Session, category_id: int) -> None:
    if not db.query(Category.id).filter(Category.id == category_id).first():
        raise ValidationError("Category not found")


@router.post("/creategame", status_code=status.HTTP_201_CREATED)
def create_game(payload: GameCreate, db: Session = Depends(get_db)):
    _ensure_category(db, payload.category_id)
    game = Game(**payload.model_dump())
    db.add(game)
    db.commit()
    db.refresh(game)
    logger.info("Game created: %s (category %s)", game.title, game.category_id)
    return {"success": True, "message": "Game created successfully", "data": GameResponse.model_validate(game)}


@router.get("/creategame")
def list_games(
    category: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    query = db.query(Game)
    if category is not None:
        query = query.filter(Game.category_id == category)
    games = query.order_by(Game.created_at.desc(), Game.id.desc()).offset(skip).limit(limit).all()
    return {"success": True, "data": [GameResponse.model_validate(g) for g in games]}


@router.get("/creategame/{game_id}")
def get_game(game_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": GameResponse.model_validate(_get_game_or_404(db, game_id))}


@router.put("/creategame/{game_id}")
def update_game(game_id: int, payload: GameUpdate, db: Session = Depends(get_db)):
    game = _get_game_or_404(db, game_id)

    if payload.category_id is not None:
        _ensure_category(db, payload.category_id)
        game.category_id = payload.category_id
    if payload.title is not None:
        game.title = payload.title.strip()
    if payload.description is not None:
        game.description = payload.description
    if payload.image_url is not None:
        game.image_url = payload.image_url
    if payload.date is not None:
        game.date = payload.date
    if payload.time is not None:
        game.time = payload.time
    if payload.lead is not None:
        game.lead = payload.lead
    if payload.co_lead is not None:
        game.co_lead = payload.co_lead
    if payload.price is not None:
        game.price = payload.price
    if payload.player is not None:
        game.player = payload.player
    if payload.venue is not None:
        game.venue = payload.venue

    db.commit()
    db.refresh(game)
    return {"success": True, "message": "Game updated successfully", "data": GameResponse.model_validate(game)}


@router.delete("/creategame/{game_id}")
def delete_game(game_id: int, db: Session = Depends(get_db)):
    game = _get_game_or_404(db, game_id)
    if db.query(Player.id).filter(Player.game_id == game_id).first():
        raise ConflictError("Game has registered players")

    db.query(JudgeAssignment).filter(JudgeAssignment.game_id == game_id).delete(synchronize_session=False)
    db.delete(game)
    db.commit()
    return {"success": True, "message": "Game deleted successfully"}
