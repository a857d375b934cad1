"""
Operator-driven admin provisioning.

There is no built-in default account. An operator runs
scripts/provision_admin.py, or sets BOOTSTRAP_ADMIN_EMAIL and
BOOTSTRAP_ADMIN_PASSWORD for a first start; otherwise startup only warns.
"""

import logging

from sqlalchemy.orm import Session

from . import models
from .auth import hash_password
from .config import settings
from .identity import admin_exists, set_role

logger = logging.getLogger(__name__)


def provision_admin(db: Session, email: str, password: str = None) -> models.User:
    """
    Create an admin account, or promote an existing account to admin.

    A password is required only when the account does not exist yet; an
    existing account keeps its password unless a new one is given.
    """
    email = (email or "").strip().lower()
    if not email:
        raise ValueError("Admin email is required")

    user = db.query(models.User).filter(models.User.email == email).first()
    if user is None:
        if not password:
            raise ValueError("A password is required to create a new admin account")
        user = models.User(email=email, password_hash=hash_password(password))
        db.add(user)
        db.flush()
        logger.info("Created admin account %s", email)
    else:
        if password:
            user.password_hash = hash_password(password)
        logger.info("Promoted existing account %s to admin", email)

    set_role(db, user.id, models.RoleName.ADMIN)
    db.commit()
    db.refresh(user)
    return user


def check_admin_on_startup(db: Session) -> bool:
    """Returns True when an admin exists after the check."""
    if admin_exists(db):
        return True

    email = settings.BOOTSTRAP_ADMIN_EMAIL
    password = settings.BOOTSTRAP_ADMIN_PASSWORD
    if email and password:
        provision_admin(db, email, password)
        return True

    logger.warning(
        "No admin account exists. Run scripts/provision_admin.py to create one."
    )
    return False
