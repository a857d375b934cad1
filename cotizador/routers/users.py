"""
User management — admin only.

Creating accounts and changing roles are privileged operations, so they
live here behind require_admin rather than in any client.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import models
from ..auth import hash_password
from ..database import get_db
from ..identity import IdentityContext, require_admin, resolve_role, set_role
from ..schemas import RoleUpdate, UserCreate
from .auth import user_to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/")
def list_users(
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(require_admin),
):
    users = db.query(models.User).order_by(models.User.email).all()
    return [user_to_response(u, resolve_role(db, u.id)) for u in users]


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_user(
    request: UserCreate,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(require_admin),
):
    email = request.email.strip().lower()
    existing = db.query(models.User).filter(models.User.email == email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Ya existe un usuario con ese correo",
        )

    user = models.User(email=email, password_hash=hash_password(request.password))
    db.add(user)
    db.flush()
    set_role(db, user.id, request.role)
    db.commit()
    db.refresh(user)

    logger.info("Admin %s created user %s (%s)", identity.current_user.id, email, request.role.value)
    return user_to_response(user, request.role)


@router.put("/{user_id}/role")
def update_role(
    user_id: int,
    request: RoleUpdate,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(require_admin),
):
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")

    if user.id == identity.current_user.id and request.role != models.RoleName.ADMIN:
        # Admins cannot demote themselves
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No puede quitarse el rol de administrador a sí mismo",
        )

    set_role(db, user.id, request.role)
    db.commit()

    logger.info("Admin %s set role of user %s to %s", identity.current_user.id, user.id, request.role.value)
    return user_to_response(user, request.role)
