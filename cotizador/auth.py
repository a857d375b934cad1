"""
Credentials and tokens.

Passwords are bcrypt hashes (passlib). Access and refresh tokens are JWTs
(python-jose) that carry only the user id and the token type; the role is
looked up on every request, so a role change applies without a new login.
Refresh tokens are additionally recorded as SHA-256 hashes and must be
found there to be redeemed.
"""

import hashlib
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import models
from .config import settings
from .database import get_db

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


# --- Passwords ---

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def authenticate_user(db: Session, email: str, password: str) -> Optional[models.User]:
    """The matching user, or None for an unknown email or a wrong password."""
    user = db.query(models.User).filter(models.User.email == email).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        return None
    return user


# --- Tokens ---

def _jwt_secret() -> str:
    if not settings.JWT_SECRET:
        logger.error("JWT_SECRET is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT_SECRET not configured",
        )
    return settings.JWT_SECRET


def _encode(user_id: int, token_type: str, lifetime: timedelta, **claims) -> str:
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "exp": datetime.utcnow() + lifetime,
        **claims,
    }
    return jwt.encode(payload, _jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int) -> str:
    return _encode(user_id, ACCESS, timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES))


def create_refresh_token(user_id: int) -> str:
    # jti keeps two refresh tokens issued in the same second distinct
    return _encode(
        user_id, REFRESH, timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
        jti=str(uuid.uuid4()),
    )


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def decode_token(token: str, expected_type: str) -> int:
    """
    Validate signature, expiry and type.

    Returns:
        The user id from the token's subject.

    Raises:
        HTTPException(401) for anything that isn't a live token of the expected type.
    """
    try:
        payload = jwt.decode(token, _jwt_secret(), algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Sesión expirada")
    except JWTError:
        raise _unauthorized("Token inválido")

    if payload.get("type") != expected_type:
        raise _unauthorized(f"Se esperaba un token de tipo {expected_type}")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Token inválido")


def _load_user(db: Session, user_id: int) -> models.User:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if user is None:
        raise _unauthorized("Usuario no encontrado")
    return user


def issue_tokens(db: Session, user: models.User) -> dict:
    """Access + refresh pair; the refresh token's hash is stored."""
    access_token = create_access_token(user.id)
    refresh_token = create_refresh_token(user.id)
    db.add(models.AuthToken(
        user_id=user.id,
        token_hash=hash_token(refresh_token),
        token_type=REFRESH,
        expires_at=datetime.utcnow() + timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
    ))
    db.commit()
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user_id": user.id,
    }


def redeem_refresh_token(db: Session, token: str) -> models.User:
    """The user a stored, unexpired refresh token belongs to."""
    user_id = decode_token(token, REFRESH)

    record = db.query(models.AuthToken).filter(
        models.AuthToken.token_hash == hash_token(token),
        models.AuthToken.token_type == REFRESH,
    ).first()
    if record is None:
        logger.info("Unknown refresh token presented for user %s", user_id)
        raise _unauthorized("Token de renovación no reconocido")
    if record.expires_at < datetime.utcnow():
        raise _unauthorized("Sesión expirada")

    return _load_user(db, user_id)


def user_from_access_token(token: str, db: Session) -> models.User:
    return _load_user(db, decode_token(token, ACCESS))


# --- FastAPI dependency ---

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> models.User:
    if credentials is None:
        raise _unauthorized("Autenticación requerida")
    return user_from_access_token(credentials.credentials, db)
