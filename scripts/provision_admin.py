#!/usr/bin/env python3
"""
Create or promote an admin account.

Usage:
    python scripts/provision_admin.py admin@example.com
    ADMIN_EMAIL=... ADMIN_PASSWORD=... python scripts/provision_admin.py

The password is prompted for (twice) unless ADMIN_PASSWORD is set.
"""

import argparse
import getpass
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cotizador.database import Base, SessionLocal, engine  # noqa: E402
from cotizador.provisioning import provision_admin  # noqa: E402


def _prompt_password() -> str:
    while True:
        password = getpass.getpass("Contraseña: ")
        confirm = getpass.getpass("Confirmar contraseña: ")
        if not password:
            print("  -> La contraseña no puede estar vacía.")
            continue
        if password != confirm:
            print("  -> Las contraseñas no coinciden, intenta de nuevo.\n")
            continue
        return password


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("email", nargs="?", default=os.getenv("ADMIN_EMAIL"))
    parser.add_argument(
        "--keep-password",
        action="store_true",
        help="promote an existing account without changing its password",
    )
    args = parser.parse_args(argv)

    if not args.email:
        parser.error("an email is required (argument or ADMIN_EMAIL)")

    password = os.getenv("ADMIN_PASSWORD")
    if not password and not args.keep_password:
        password = _prompt_password()

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = provision_admin(db, args.email, password)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return 1
    finally:
        db.close()

    print(f"[OK] Admin listo: {user.email} (id={user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
