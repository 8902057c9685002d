import logging
import os
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from auth import get_password_hash
from database import get_db
from email_templates import build_judge_assignment_email
from emailer import send_notification
from errors import ConflictError, NotFoundError, ValidationError
from models import Account, AccountRole, AccountStatus, Game, Judge, JudgeAssignment
from schemas import JudgeCreate, JudgeResponse, JudgeUpdate

router = APIRouter()
logger = logging.getLogger(__name__)

JUDGE_DEFAULT_PASSWORD = os.environ.get("JUDGE_DEFAULT_PASSWORD", "123456")
FRONTEND_BASE_URL = os.environ.get("FRONTEND_BASE_URL", "http://localhost:3000").rstrip("/")


def _get_judge_or_404(db: Session, judge_id: int) -> Judge:
    judge = (
        db.query(Judge)
        .options(joinedload(Judge.assignments).joinedload(JudgeAssignment.game))
        .filter(Judge.id == judge_id)
        .first()
    )
    if not judge:
        raise NotFoundError("Judge not found")
    return judge


def _resolve_assigned_game(db: Session, game_ids: List[int]) -> Optional[Game]:
    unique_ids = list(dict.fromkeys(game_ids))
    if len(unique_ids) > 1:
        raise ValidationError("A judge can only be assigned to one game")
    if not unique_ids:
        return None
    game = db.query(Game).filter(Game.id == unique_ids[0]).first()
    if not game:
        raise ValidationError("Assigned game not found")
    return game


def _notify_assignment(background_tasks: BackgroundTasks, judge: Judge, game: Game) -> None:
    subject, html, text = build_judge_assignment_email(
        judge.name,
        game.title,
        JUDGE_DEFAULT_PASSWORD,
        f"{FRONTEND_BASE_URL}/judge/profile",
    )
    background_tasks.add_task(send_notification, judge.email, subject, html, text)


@router.post("/judges", status_code=status.HTTP_201_CREATED)
def create_judge(payload: JudgeCreate, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    email = str(payload.email).lower()
    if db.query(Judge.id).filter(Judge.email == email).first():
        raise ValidationError("Judge with this email already exists")
    if db.query(Account.id).filter(Account.email == email).first():
        raise ValidationError("An account with this email already exists")

    game = _resolve_assigned_game(db, payload.assigned_games)

    account = Account(
        name=payload.name.strip(),
        email=email,
        hashed_password=get_password_hash(JUDGE_DEFAULT_PASSWORD),
        role=AccountRole.JUDGE,
        status=AccountStatus.ACCEPTED,
    )
    db.add(account)
    try:
        db.flush()
        judge = Judge(name=account.name, email=email, contact=payload.contact, account_id=account.id)
        if game is not None:
            judge.assignments.append(JudgeAssignment(game_id=game.id))
        db.add(judge)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Judge with this email already exists")

    judge = _get_judge_or_404(db, judge.id)
    logger.info("Judge created: %s", judge.email)
    if game is not None:
        _notify_assignment(background_tasks, judge, game)
    return {"success": True, "message": "Judge created successfully", "data": JudgeResponse.model_validate(judge)}


@router.get("/judges")
def list_judges(
    db: Session = Depends(get_db),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    judges = (
        db.query(Judge)
        .options(joinedload(Judge.assignments).joinedload(JudgeAssignment.game))
        .order_by(Judge.created_at.desc(), Judge.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {"success": True, "data": [JudgeResponse.model_validate(j) for j in judges]}


@router.get("/judges/{judge_id}")
def get_judge(judge_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": JudgeResponse.model_validate(_get_judge_or_404(db, judge_id))}


@router.put("/judges/{judge_id}")
def update_judge(
    judge_id: int,
    payload: JudgeUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    judge = _get_judge_or_404(db, judge_id)
    account = db.query(Account).filter(Account.id == judge.account_id).first() if judge.account_id else None

    if payload.email is not None:
        email = str(payload.email).lower()
        if email != judge.email:
            if db.query(Judge.id).filter(Judge.email == email, Judge.id != judge.id).first():
                raise ValidationError("Judge with this email already exists")
            account_query = db.query(Account.id).filter(Account.email == email)
            if account is not None:
                account_query = account_query.filter(Account.id != account.id)
            if account_query.first():
                raise ValidationError("An account with this email already exists")
            judge.email = email
            if account is not None:
                account.email = email
    if payload.name is not None:
        judge.name = payload.name.strip()
        if account is not None:
            account.name = judge.name
    if payload.contact is not None:
        judge.contact = payload.contact

    new_game = None
    if payload.assigned_games is not None:
        game = _resolve_assigned_game(db, payload.assigned_games)
        current_ids = [a.game_id for a in judge.assignments]
        target_ids = [game.id] if game is not None else []
        if current_ids != target_ids:
            judge.assignments.clear()
            if game is not None:
                judge.assignments.append(JudgeAssignment(game_id=game.id))
                new_game = game

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Judge with this email already exists")

    judge = _get_judge_or_404(db, judge_id)
    if new_game is not None:
        _notify_assignment(background_tasks, judge, new_game)
    return {"success": True, "message": "Judge updated successfully", "data": JudgeResponse.model_validate(judge)}


@router.delete("/judges/{judge_id}")
def delete_judge(judge_id: int, db: Session = Depends(get_db)):
    judge = _get_judge_or_404(db, judge_id)
    account_id = judge.account_id
    account = db.query(Account).filter(Account.id == account_id).first() if account_id else None
    db.delete(judge)
    if account is not None:
        db.delete(account)
    db.commit()
    logger.info("Judge %s deleted with account %s", judge_id, account_id)
    return {"success": True, "message": "Judge deleted successfully"}
