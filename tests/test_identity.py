"""
Identity context, role resolution and admin provisioning.
"""

import pytest

from conftest import create_user
from cotizador import models
from cotizador.config import settings
from cotizador.identity import IdentityContext, admin_exists, resolve_role, set_role
from cotizador.provisioning import check_admin_on_startup, provision_admin
from cotizador.auth import verify_password


# ============================================================
# Role resolution
# ============================================================

def test_missing_role_record_resolves_to_user(db):
    user_id = create_user("sinrol@taller.com")
    assert resolve_role(db, user_id) == models.RoleName.USER


def test_admin_role_resolved(db):
    user_id = create_user("jefa@taller.com", role=models.RoleName.ADMIN)
    assert resolve_role(db, user_id) == models.RoleName.ADMIN


def test_set_role_upserts_single_record(db):
    user_id = create_user("cambio@taller.com", role=models.RoleName.USER)

    set_role(db, user_id, models.RoleName.ADMIN)
    db.commit()
    set_role(db, user_id, models.RoleName.ADMIN)
    db.commit()

    records = db.query(models.UserRole).filter(models.UserRole.user_id == user_id).all()
    assert len(records) == 1
    assert records[0].role == models.RoleName.ADMIN


def test_role_stored_by_value(db):
    user_id = create_user("valor@taller.com", role=models.RoleName.ADMIN)
    raw = db.execute(
        models.UserRole.__table__.select().where(models.UserRole.user_id == user_id)
    ).first()
    assert raw.role == "admin"


# ============================================================
# IdentityContext
# ============================================================

class _User:
    def __init__(self, id):
        self.id = id


def test_context_resolves_role_on_set_user():
    roles = {1: models.RoleName.ADMIN, 2: models.RoleName.USER}
    ctx = IdentityContext(roles.get)

    assert ctx.current_user is None
    assert not ctx.is_admin

    ctx.set_user(_User(1))
    assert ctx.role == models.RoleName.ADMIN
    assert ctx.is_admin

    ctx.set_user(_User(2))
    assert not ctx.is_admin


def test_listeners_notified_on_change():
    seen = []
    ctx = IdentityContext(lambda user_id: models.RoleName.USER)
    ctx.subscribe(lambda c: seen.append(c.current_user))

    alice = _User(7)
    ctx.set_user(alice)
    ctx.set_user(None)

    assert seen == [alice, None]


def test_unsubscribe_stops_notifications():
    seen = []
    ctx = IdentityContext(lambda user_id: models.RoleName.USER)
    unsubscribe = ctx.subscribe(lambda c: seen.append(c.role))

    ctx.set_user(_User(1))
    unsubscribe()
    unsubscribe()
    ctx.set_user(_User(2))

    assert len(seen) == 1


def test_refresh_role_picks_up_changes():
    roles = {3: models.RoleName.USER}
    ctx = IdentityContext(roles.get, _User(3))
    assert not ctx.is_admin

    roles[3] = models.RoleName.ADMIN
    assert ctx.refresh_role() == models.RoleName.ADMIN
    assert ctx.is_admin


# ============================================================
# Provisioning
# ============================================================

def test_provision_creates_admin(db):
    assert not admin_exists(db)

    user = provision_admin(db, "  nueva@taller.com ", "secreto123")

    assert user.email == "nueva@taller.com"
    assert verify_password("secreto123", user.password_hash)
    assert resolve_role(db, user.id) == models.RoleName.ADMIN
    assert admin_exists(db)


def test_provision_promotes_existing_account_keeping_password(db):
    user_id = create_user("existente@taller.com", password="original123")

    user = provision_admin(db, "existente@taller.com")

    assert user.id == user_id
    assert verify_password("original123", user.password_hash)
    assert resolve_role(db, user_id) == models.RoleName.ADMIN


def test_provision_requires_email_and_password_for_new_account(db):
    with pytest.raises(ValueError):
        provision_admin(db, "   ", "secreto123")
    with pytest.raises(ValueError):
        provision_admin(db, "nadie@taller.com")


def test_startup_check_warns_without_bootstrap(db, monkeypatch):
    monkeypatch.setattr(settings, "BOOTSTRAP_ADMIN_EMAIL", None)
    monkeypatch.setattr(settings, "BOOTSTRAP_ADMIN_PASSWORD", None)
    assert check_admin_on_startup(db) is False
    assert not admin_exists(db)


def test_startup_check_provisions_from_settings(db, monkeypatch):
    monkeypatch.setattr(settings, "BOOTSTRAP_ADMIN_EMAIL", "arranque@taller.com")
    monkeypatch.setattr(settings, "BOOTSTRAP_ADMIN_PASSWORD", "secreto123")
    assert check_admin_on_startup(db) is True
    assert admin_exists(db)


def test_provisioned_mixed_case_email_can_log_in(client, db):
    provision_admin(db, " Admin@Taller.com ", "secreto123")

    response = client.post("/api/auth/login", json={
        "email": "admin@taller.com", "password": "secreto123",
    })
    assert response.status_code == 200
    assert response.json()["user"]["is_admin"] is True


def test_provision_promotes_lowercase_account_given_mixed_case(db):
    user_id = create_user("jefe@taller.com")

    user = provision_admin(db, "Jefe@Taller.com")

    assert user.id == user_id
    assert db.query(models.User).count() == 1
    assert resolve_role(db, user_id) == models.RoleName.ADMIN
