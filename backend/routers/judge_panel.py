from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from database import get_db
from errors import NotFoundError
from models import AssignmentStatus, Judge, JudgeAssignment
from schemas import GameResultRequest, GameResponse, JudgeAssignmentResponse
from security import require_judge

router = APIRouter()


@router.get("/judge-panel/assigned-games")
def assigned_games(judge: Judge = Depends(require_judge), db: Session = Depends(get_db)):
    assignments = (
        db.query(JudgeAssignment)
        .options(joinedload(JudgeAssignment.game))
        .filter(JudgeAssignment.judge_id == judge.id)
        .order_by(JudgeAssignment.id.asc())
        .all()
    )
    data = []
    for assignment in assignments:
        data.append({
            "assignment": JudgeAssignmentResponse.model_validate(assignment),
            "game": GameResponse.model_validate(assignment.game) if assignment.game else None,
        })
    return {"success": True, "data": data}


@router.post("/judge-panel/announce-result/{game_id}")
def announce_result(
    game_id: int,
    payload: GameResultRequest,
    judge: Judge = Depends(require_judge),
    db: Session = Depends(get_db)
):
    assignment = (
        db.query(JudgeAssignment)
        .filter(JudgeAssignment.judge_id == judge.id, JudgeAssignment.game_id == game_id)
        .first()
    )
    if not assignment:
        raise NotFoundError("Game not found or not assigned to this judge")

    assignment.winner = payload.winner.strip()
    assignment.runner_up = payload.runner_up.strip() if payload.runner_up else None
    assignment.status = AssignmentStatus.COMPLETED
    assignment.announced_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(assignment)
    return {
        "success": True,
        "message": "Result announced successfully",
        "data": JudgeAssignmentResponse.model_validate(assignment),
    }
