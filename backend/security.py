from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from auth import get_current_account
from models import Account, AccountRole, Judge


def require_admin(account: Account = Depends(get_current_account)) -> Account:
    if account.role != AccountRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return account


def require_judge(
    account: Account = Depends(get_current_account),
    db: Session = Depends(get_db)
) -> Judge:
    if account.role != AccountRole.JUDGE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access restricted to judges only")
    judge = db.query(Judge).filter(Judge.email == account.email).first()
    if not judge:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Judge not found")
    return judge
