import hashlib
import secrets
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt

from clubhub.core.config import settings

ALGO = "HS256"

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def _token_payload(sub: str, token_type: str, exp: datetime, claims: dict | None) -> dict:
    payload = {"sub": sub, "type": token_type, "exp": exp}
    if claims:
        payload.update(claims)
    return payload

def create_access_token(sub: str, claims: dict | None = None) -> str:
    exp = now_utc() + timedelta(minutes=settings.JWT_ACCESS_MINUTES)
    return jwt.encode(_token_payload(sub, "access", exp, claims), settings.JWT_SECRET, algorithm=ALGO)

def create_refresh_token(sub: str, claims: dict | None = None) -> str:
    exp = now_utc() + timedelta(days=settings.JWT_REFRESH_DAYS)
    payload = _token_payload(sub, "refresh", exp, claims)
    # jti keeps two refresh tokens minted in the same second distinct
    payload["jti"] = secrets.token_hex(8)
    return jwt.encode(payload, settings.refresh_secret, algorithm=ALGO)

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGO])

def decode_refresh_token(token: str) -> dict:
    return jwt.decode(token, settings.refresh_secret, algorithms=[ALGO])

def random_url_token() -> str:
    # 32 random bytes, hex encoded
    return secrets.token_hex(32)

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

def hash_password(password: str) -> str:
    raw = password.encode("utf-8")
    return bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
