"""
Identity and role resolution.

IdentityContext is the explicit replacement for a process-wide auth store:
whoever needs the current user and role receives the context object, and
interested components subscribe to identity changes instead of polling a
global. The role is re-resolved on every change.
"""

import logging
from typing import Callable, List, Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from . import models
from .auth import get_current_user
from .database import get_db

logger = logging.getLogger(__name__)

RoleResolver = Callable[[int], models.RoleName]
IdentityListener = Callable[["IdentityContext"], None]


def resolve_role(db: Session, user_id: int) -> models.RoleName:
    """A missing assignment means 'user' — never an error that blocks login."""
    record = db.query(models.UserRole).filter(models.UserRole.user_id == user_id).first()
    if record is None:
        return models.RoleName.USER
    return models.RoleName(record.role)


def set_role(db: Session, user_id: int, role: models.RoleName) -> models.UserRole:
    """Upsert the single role record for a user. Caller commits."""
    record = db.query(models.UserRole).filter(models.UserRole.user_id == user_id).first()
    if record is None:
        record = models.UserRole(user_id=user_id, role=role)
        db.add(record)
    else:
        record.role = role
    return record


def admin_exists(db: Session) -> bool:
    return db.query(models.UserRole).filter(
        models.UserRole.role == models.RoleName.ADMIN
    ).first() is not None


class IdentityContext:
    """Current user + resolved role, with change notification."""

    def __init__(self, role_resolver: RoleResolver, user: Optional[models.User] = None):
        self._role_resolver = role_resolver
        self._listeners: List[IdentityListener] = []
        self._user = None
        self._role = models.RoleName.USER
        if user is not None:
            self.set_user(user)

    @property
    def current_user(self) -> Optional[models.User]:
        return self._user

    @property
    def role(self) -> models.RoleName:
        return self._role

    @property
    def is_admin(self) -> bool:
        return self._user is not None and self._role == models.RoleName.ADMIN

    def set_user(self, user: Optional[models.User]) -> None:
        """Switch identity (login, logout, token refresh) and notify listeners."""
        self._user = user
        self._role = self._role_resolver(user.id) if user is not None else models.RoleName.USER
        for listener in list(self._listeners):
            listener(self)

    def refresh_role(self) -> models.RoleName:
        """Re-resolve the role for the same user, e.g. after an admin changed it."""
        self.set_user(self._user)
        return self._role

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


# --- FastAPI dependencies ---

def get_identity(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> IdentityContext:
    return IdentityContext(lambda user_id: resolve_role(db, user_id), current_user)


def require_admin(identity: IdentityContext = Depends(get_identity)) -> IdentityContext:
    if not identity.is_admin:
        logger.info("Admin route denied for user %s", identity.current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acceso no autorizado",
        )
    return identity
