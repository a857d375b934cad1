"""
Auth endpoints: login, refresh, me.

There is no self-registration. Accounts are created by an admin
(POST /api/users) or by scripts/provision_admin.py.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import models
from ..auth import authenticate_user, create_access_token, issue_tokens, redeem_refresh_token
from ..database import get_db
from ..identity import IdentityContext, get_identity, resolve_role
from ..schemas import LoginRequest, RefreshRequest

router = APIRouter(prefix="/auth", tags=["auth"])


def user_to_response(user: models.User, role: models.RoleName) -> dict:
    """Public view of an account. The password hash never leaves the server."""
    return {
        "id": user.id,
        "email": user.email,
        "role": role.value,
        "is_admin": role == models.RoleName.ADMIN,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, request.email.strip().lower(), request.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Correo o contraseña inválidos",
        )
    return {**issue_tokens(db, user), "user": user_to_response(user, resolve_role(db, user.id))}


@router.post("/refresh")
def refresh(request: RefreshRequest, db: Session = Depends(get_db)):
    """New access token; the refresh token stays valid until it expires."""
    user = redeem_refresh_token(db, request.refresh_token)
    return {
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user_id": user.id,
    }


@router.get("/me")
def me(identity: IdentityContext = Depends(get_identity)):
    return user_to_response(identity.current_user, identity.role)
