import json
import logging
import os
from urllib.error import URLError
from urllib.parse import urlencode
from urllib.request import Request as UrlRequest, urlopen

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import (
    create_access_token,
    create_tokens_for_account,
    decode_token,
    get_current_account,
    get_password_hash,
    security,
    token_claims,
    token_expiry,
    verify_password,
)
from database import get_db
from errors import ConflictError
from models import Account, AccountRole, AccountStatus, Judge
from schemas import (
    AccessTokenResponse,
    AccountLogin,
    AccountRegister,
    AccountResponse,
    GoogleLoginRequest,
    RefreshTokenRequest,
    TokenResponse,
)
from token_store import revoke_token

router = APIRouter()
logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
# Granted by an admin through /accounts or /judges, never by sign-up
PRIVILEGED_ROLES = {AccountRole.ADMIN, AccountRole.JUDGE}


def _token_response(account: Account) -> TokenResponse:
    tokens = create_tokens_for_account(account)
    return TokenResponse(
        access_token=tokens["access_token"],
        refresh_token=tokens["refresh_token"],
        user=AccountResponse.model_validate(account),
    )


def _verify_google_id_token(token_id: str) -> dict:
    """Ask Google to validate an ID token and return its claims."""
    client_id = os.environ.get("GOOGLE_CLIENT_ID")
    if not client_id:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Google sign-in is not configured")

    request = UrlRequest(f"{GOOGLE_TOKENINFO_URL}?{urlencode({'id_token': token_id})}")
    try:
        with urlopen(request, timeout=8) as response:
            claims = json.loads(response.read().decode("utf-8"))
    except (URLError, ValueError) as exc:
        logger.warning("Google token verification failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token")

    if claims.get("aud") != client_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token")
    if str(claims.get("email_verified", "")).lower() != "true":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Google email is not verified")
    return claims


def _authenticate(db: Session, login_data: AccountLogin) -> Account:
    account = db.query(Account).filter(Account.email == str(login_data.email).lower()).first()
    if not account or not verify_password(login_data.password, account.hashed_password):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid email or password")
    if account.role == AccountRole.JUDGE:
        if not db.query(Judge.id).filter(Judge.email == account.email).first():
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Judge profile not found")
    return account


@router.post("/auth/register", status_code=status.HTTP_201_CREATED, response_model=TokenResponse)
def register(user_data: AccountRegister, db: Session = Depends(get_db)):
    email = str(user_data.email).lower()
    if db.query(Account.id).filter(Account.email == email).first():
        raise ConflictError("User already exists", status_code=status.HTTP_403_FORBIDDEN)
    if AccountRole(user_data.role.value) in PRIVILEGED_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This role cannot be self-assigned")

    account = Account(
        name=user_data.name.strip(),
        email=email,
        hashed_password=get_password_hash(user_data.password),
        role=AccountRole(user_data.role.value),
        status=AccountStatus.PENDING,
        is_participant=user_data.is_participant,
        cnic=user_data.cnic.strip(),
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists", status_code=status.HTTP_403_FORBIDDEN)
    db.refresh(account)
    logger.info("Account registered: %s", account.email)
    return _token_response(account)


@router.post("/auth/login", response_model=TokenResponse)
def login(login_data: AccountLogin, db: Session = Depends(get_db)):
    return _token_response(_authenticate(db, login_data))


@router.post("/auth/judge-login", response_model=TokenResponse)
def judge_login(login_data: AccountLogin, db: Session = Depends(get_db)):
    account = _authenticate(db, login_data)
    if account.role != AccountRole.JUDGE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access restricted to judges only")
    return _token_response(account)


@router.post("/auth/google", response_model=TokenResponse)
def google_login(payload: GoogleLoginRequest, db: Session = Depends(get_db)):
    claims = _verify_google_id_token(payload.token_id)
    email = str(claims.get("email") or "").strip().lower()
    google_id = str(claims.get("sub") or "").strip()
    if not email or not google_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token")

    account = db.query(Account).filter(Account.google_id == google_id).first()
    if account is not None and account.email != email:
        # Google keeps the subject id when the user's address changes
        if db.query(Account.id).filter(Account.email == email, Account.id != account.id).first():
            raise ConflictError("Another account already uses this email")
        logger.info("Google account %s changed email from %s to %s", google_id, account.email, email)
        account.email = email
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Another account already uses this email")
    if account is None:
        account = db.query(Account).filter(Account.email == email).first()
    if account is None:
        account = Account(
            name=str(claims.get("name") or email.split("@")[0]).strip(),
            email=email,
            google_id=google_id,
            role=AccountRole.USER,
            status=AccountStatus.PENDING,
        )
        db.add(account)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            account = (
                db.query(Account)
                .filter((Account.google_id == google_id) | (Account.email == email))
                .first()
            )
            if account is None:
                raise ConflictError("Account could not be created")
        else:
            logger.info("Account created from Google sign-in: %s", email)
    elif not account.google_id:
        account.google_id = google_id
        db.commit()
    elif account.google_id != google_id:
        raise ConflictError("This email is linked to a different Google account", status_code=status.HTTP_403_FORBIDDEN)
    db.refresh(account)
    return _token_response(account)


@router.post("/auth/refresh", response_model=AccessTokenResponse)
def refresh(request: RefreshTokenRequest, db: Session = Depends(get_db)):
    payload = decode_token(request.refresh_token)
    if payload.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    subject = str(payload.get("sub") or "")
    account = db.query(Account).filter(Account.id == int(subject)).first() if subject.isdigit() else None
    if not account:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return AccessTokenResponse(access_token=create_access_token(token_claims(account)))


@router.post("/auth/logout")
def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    account: Account = Depends(get_current_account),
    db: Session = Depends(get_db)
):
    token = credentials.credentials
    revoke_token(db, token, token_expiry(decode_token(token)))
    logger.info("Account %s logged out", account.id)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/auth/me", response_model=AccountResponse)
def me(account: Account = Depends(get_current_account)):
    return account
