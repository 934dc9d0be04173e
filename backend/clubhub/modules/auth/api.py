import logging
from datetime import timedelta

import sqlalchemy as sa
from fastapi import APIRouter, Depends
from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubhub.api.deps import get_current_user
from clubhub.core.config import settings
from clubhub.core.errors import ConflictError, UnauthorizedError, ValidationError
from clubhub.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    hash_token,
    now_utc,
    random_url_token,
    verify_password,
)
from clubhub.db.session import get_db
from clubhub.schemas.auth import (
    AuthOut,
    ForgotPasswordIn,
    ForgotPasswordOut,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    ResetPasswordIn,
    TokenOut,
    VerifyEmailIn,
)
from clubhub.schemas.common import SimpleOKOut
from clubhub.schemas.users import UserOut
from clubhub.services import mail
from clubhub.services.audit import audit
from clubhub.services.users import UserRecord, get_user, get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_tokens(db: Session, user: UserRecord) -> TokenOut:
    sub = str(user.id)
    refresh_token = create_refresh_token(sub)
    db.execute(sa.text("""
        INSERT INTO refresh_tokens (user_id, token_hash, expires_at)
        VALUES (:u, :h, :e)
    """), {
        "u": user.id,
        "h": hash_token(refresh_token),
        "e": now_utc() + timedelta(days=settings.JWT_REFRESH_DAYS),
    })
    access_token = create_access_token(sub, {"role": user.role})
    return TokenOut(access_token=access_token, refresh_token=refresh_token)


def _revoke_all_refresh_tokens(db: Session, user_id: int) -> int:
    return db.execute(sa.text("""
        UPDATE refresh_tokens
        SET revoked_at=now()
        WHERE user_id=:u AND revoked_at IS NULL
    """), {"u": user_id}).rowcount


def _create_one_time_token(db: Session, table: str, user_id: int, ttl: timedelta) -> str:
    token = random_url_token()
    db.execute(sa.text(f"""
        INSERT INTO {table} (user_id, token_hash, expires_at)
        VALUES (:u, :h, :e)
    """), {"u": user_id, "h": hash_token(token), "e": now_utc() + ttl})
    return token


def _consume_one_time_token(db: Session, table: str, token: str, label: str) -> int:
    row = db.execute(sa.text(f"""
        SELECT id, user_id, expires_at, used_at
        FROM {table}
        WHERE token_hash=:h
        FOR UPDATE
    """), {"h": hash_token(token)}).mappings().first()
    if not row or row["used_at"] is not None:
        raise ValidationError(f"Invalid or already used {label} token")
    if now_utc() > row["expires_at"]:
        raise ValidationError(f"{label.capitalize()} token expired")
    db.execute(sa.text(f"UPDATE {table} SET used_at=now() WHERE id=:id"), {"id": row["id"]})
    return row["user_id"]


@router.post("/register", response_model=AuthOut, status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise ConflictError("Email already registered")
    try:
        user_id = db.execute(sa.text("""
            INSERT INTO users (email, password_hash, full_name)
            VALUES (:e, :h, :n)
            RETURNING id
        """), {"e": payload.email, "h": hash_password(payload.password), "n": payload.full_name}).scalar_one()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Email already registered") from exc

    user = get_user(db, user_id)
    token = _create_one_time_token(
        db, "email_verification_tokens", user_id, timedelta(hours=settings.EMAIL_VERIFICATION_TTL_HOURS)
    )
    tokens = _issue_tokens(db, user)
    audit(db, user_id, "auth", user_id, "register", {})
    db.commit()

    mail.send_verification_email(user.email, user.full_name, token)
    return AuthOut(
        **tokens.model_dump(),
        user=user.out(),
        dev_token=token if settings.ENV == "dev" else None,
    )


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    row = get_user_by_email(db, payload.email)
    if not row or not verify_password(payload.password, row["password_hash"]):
        logger.info("failed login for %s", payload.email)
        raise UnauthorizedError("Invalid email or password")
    user = UserRecord.from_row(row)
    if not user.is_active:
        raise UnauthorizedError("Account is disabled")

    tokens = _issue_tokens(db, user)
    audit(db, user.id, "auth", user.id, "login", {})
    db.commit()
    return AuthOut(**tokens.model_dump(), user=user.out())


@router.post("/refresh", response_model=TokenOut)
def refresh(payload: RefreshIn, db: Session = Depends(get_db)):
    try:
        decoded = decode_refresh_token(payload.refresh_token)
    except JWTError:
        raise UnauthorizedError("Invalid refresh token")
    if decoded.get("type") != "refresh":
        raise UnauthorizedError("Invalid token type")

    row = db.execute(sa.text("""
        SELECT id, user_id, expires_at, revoked_at
        FROM refresh_tokens
        WHERE token_hash=:h
        FOR UPDATE
    """), {"h": hash_token(payload.refresh_token)}).mappings().first()
    if not row or str(row["user_id"]) != str(decoded.get("sub")):
        raise UnauthorizedError("Refresh token not found")
    if row["revoked_at"] is not None:
        raise UnauthorizedError("Refresh token revoked")
    if now_utc() > row["expires_at"]:
        raise UnauthorizedError("Refresh token expired")

    user = get_user(db, row["user_id"])
    if not user or not user.is_active:
        raise UnauthorizedError("Account is disabled")

    db.execute(sa.text("UPDATE refresh_tokens SET revoked_at=now() WHERE id=:id"), {"id": row["id"]})
    tokens = _issue_tokens(db, user)
    db.commit()
    return tokens


@router.post("/logout", response_model=SimpleOKOut)
def logout(
    payload: LogoutIn | None = None,
    user: UserRecord = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    revoked = _revoke_all_refresh_tokens(db, user.id)
    audit(db, user.id, "auth", user.id, "logout", {"revoked": revoked})
    db.commit()
    return SimpleOKOut(ok=True)


@router.post("/verify-email", response_model=SimpleOKOut)
def verify_email(payload: VerifyEmailIn, db: Session = Depends(get_db)):
    user_id = _consume_one_time_token(db, "email_verification_tokens", payload.token, "verification")
    db.execute(sa.text("""
        UPDATE users SET email_verified=true, updated_at=now() WHERE id=:u
    """), {"u": user_id})
    audit(db, user_id, "auth", user_id, "email_verified", {})
    db.commit()
    return SimpleOKOut(ok=True)


@router.post("/forgot-password", response_model=ForgotPasswordOut)
def forgot_password(payload: ForgotPasswordIn, db: Session = Depends(get_db)):
    row = get_user_by_email(db, payload.email)
    if not row or not row["is_active"]:
        # same answer whether or not the account exists
        return ForgotPasswordOut(ok=True)

    token = _create_one_time_token(
        db, "password_reset_tokens", row["id"], timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES)
    )
    audit(db, row["id"], "auth", row["id"], "password_reset_requested", {})
    db.commit()

    mail.send_password_reset_email(row["email"], row["full_name"], token)
    return ForgotPasswordOut(ok=True, dev_token=token if settings.ENV == "dev" else None)


@router.post("/reset-password", response_model=SimpleOKOut)
def reset_password(payload: ResetPasswordIn, db: Session = Depends(get_db)):
    user_id = _consume_one_time_token(db, "password_reset_tokens", payload.token, "reset")
    db.execute(sa.text("""
        UPDATE users SET password_hash=:h, updated_at=now() WHERE id=:u
    """), {"u": user_id, "h": hash_password(payload.new_password)})
    _revoke_all_refresh_tokens(db, user_id)
    audit(db, user_id, "auth", user_id, "password_reset", {})
    db.commit()
    return SimpleOKOut(ok=True)


@router.get("/me", response_model=UserOut)
def me(user: UserRecord = Depends(get_current_user)):
    return user.out()
