import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from errors import NotFoundError, ValidationError
from models import Account, AccountRole, AccountStatus, Judge
from schemas import AccountResponse, AccountRoleEnum, AccountUpdate
from security import require_admin

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_account_or_404(db: Session, account_id: int) -> Account:
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise NotFoundError("Account not found")
    return account


@router.get("/accounts")
def list_accounts(
    role: Optional[AccountRoleEnum] = Query(default=None),
    admin: Account = Depends(require_admin),
    db: Session = Depends(get_db),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    query = db.query(Account)
    if role is not None:
        query = query.filter(Account.role == AccountRole(role.value))
    accounts = query.order_by(Account.created_at.desc(), Account.id.desc()).offset(skip).limit(limit).all()
    return {"success": True, "data": [AccountResponse.model_validate(a) for a in accounts]}


@router.get("/accounts/{account_id}")
def get_account(account_id: int, admin: Account = Depends(require_admin), db: Session = Depends(get_db)):
    return {"success": True, "data": AccountResponse.model_validate(_get_account_or_404(db, account_id))}


@router.put("/accounts/{account_id}")
def update_account(
    account_id: int,
    payload: AccountUpdate,
    admin: Account = Depends(require_admin),
    db: Session = Depends(get_db)
):
    account = _get_account_or_404(db, account_id)

    if payload.name is not None:
        account.name = payload.name.strip()
    if payload.role is not None:
        if account.id == admin.id and payload.role != AccountRoleEnum.ADMIN:
            raise ValidationError("Admins cannot remove their own admin role")
        account.role = AccountRole(payload.role.value)
    if payload.status is not None:
        account.status = AccountStatus(payload.status.value)
    if payload.is_participant is not None:
        account.is_participant = payload.is_participant
    if payload.position is not None:
        account.position = payload.position.strip() or None
    if payload.subpost is not None:
        account.subpost = payload.subpost.strip() or None

    db.commit()
    db.refresh(account)
    logger.info("Account %s updated by admin %s", account.id, admin.id)
    return {"success": True, "message": "Account updated successfully", "data": AccountResponse.model_validate(account)}


@router.delete("/accounts/{account_id}")
def delete_account(account_id: int, admin: Account = Depends(require_admin), db: Session = Depends(get_db)):
    account = _get_account_or_404(db, account_id)
    if account.id == admin.id:
        raise ValidationError("Admins cannot delete their own account")

    db.query(Judge).filter(Judge.account_id == account.id).update({Judge.account_id: None}, synchronize_session=False)
    db.delete(account)
    db.commit()
    logger.info("Account %s deleted by admin %s", account_id, admin.id)
    return {"success": True, "message": "Account deleted successfully"}
