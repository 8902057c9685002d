import hashlib
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import RevokedToken

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def purge_expired_tokens(db: Session) -> int:
    now = datetime.now(timezone.utc)
    removed = db.query(RevokedToken).filter(RevokedToken.expires_at < now).delete(synchronize_session=False)
    return removed or 0


def revoke_token(db: Session, token: str, expires_at: datetime) -> None:
    """Record a bearer token as revoked until it would have expired anyway."""
    purged = purge_expired_tokens(db)
    if purged:
        logger.info("Purged %s expired revoked tokens", purged)

    token_hash = hash_token(token)
    if db.query(RevokedToken.id).filter(RevokedToken.token_hash == token_hash).first():
        db.commit()
        return

    db.add(RevokedToken(token_hash=token_hash, expires_at=expires_at))
    try:
        db.commit()
    except IntegrityError:
        # Another instance revoked the same token first.
        db.rollback()


def is_token_revoked(db: Session, token: str) -> bool:
    token_hash = hash_token(token)
    return db.query(RevokedToken.id).filter(RevokedToken.token_hash == token_hash).first() is not None
