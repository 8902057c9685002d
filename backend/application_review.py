import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from errors import InvalidStatusError, NotFoundError
from models import Account, AccountRole, Application, ApplicationStatus

logger = logging.getLogger(__name__)

LEADERSHIP_POSTS = ("E-Games", "Geek Games", "General Games")


def _normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = str(value).strip()
    return normalized or None


def parse_application_status(value: Optional[str]) -> ApplicationStatus:
    try:
        return ApplicationStatus(str(value or "").strip())
    except ValueError:
        raise InvalidStatusError()


def get_application_or_404(db: Session, application_id: int) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFoundError("Application not found")
    return application


def find_applications_by_email(db: Session, email: str) -> List[Application]:
    return (
        db.query(Application)
        .filter(Application.email == email)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )


def promote_applicant_account(db: Session, application: Application) -> Optional[Account]:
    email = _normalize_text(application.email)
    if not email:
        logger.info("Application %s has no email; skipping account promotion", application.id)
        return None

    account = db.query(Account).filter(Account.email == email).first()
    if not account:
        logger.info("No account registered for %s; skipping account promotion", email)
        return None

    account.is_participant = True
    account.role = AccountRole.PARTICIPANT
    account.position = application.post
    account.subpost = application.subpost
    db.commit()
    return account


def review_application(db: Session, application_id: int, new_status: Optional[str]) -> Application:
    """Set an application's status and, on acceptance, promote the matching account.

    The status change is committed before the promotion is attempted. A failed
    promotion is logged and rolled back on its own; the review still succeeds.
    Transitions are not restricted, so re-accepting re-runs the promotion.
    """
    target = parse_application_status(new_status)
    application = get_application_or_404(db, application_id)

    application.status = target
    db.commit()
    db.refresh(application)

    if target == ApplicationStatus.ACCEPTED:
        try:
            promote_applicant_account(db, application)
        except Exception:
            db.rollback()
            logger.exception("Account promotion failed for application %s", application.id)
        db.refresh(application)

    return application
