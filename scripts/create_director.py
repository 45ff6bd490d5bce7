"""
Name: Director Bootstrap Script

Responsibilities:
  - Create the first director (principal + approved profile), idempotent by email
  - Hash passwords with Argon2
  - Store both rows in PostgreSQL in a single transaction

Usage:
  DATABASE_URL=... python scripts/create_director.py --email boss@example.com \
      --full-name "Boss" [--office-id HQ] [--password ...]
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from uuid import uuid4

import psycopg

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from provisioning.identity.passwords import hash_password  # noqa: E402
from provisioning.infrastructure.repositories.postgres.principal import (  # noqa: E402
    normalize_email,
)
from provisioning.identity.users import (  # noqa: E402
    ApprovalStatus,
    UserRole,
    UserStatus,
)


def _require_database_url() -> str:
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("DATABASE_URL is required to create a director.")
    return db_url


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Password is required.")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == "--":
        argv = argv[1:]
    parser = argparse.ArgumentParser(
        description="Create the first director account (idempotent)."
    )
    parser.add_argument("--email", required=True, help="Director email")
    parser.add_argument("--full-name", required=True, help="Director full name")
    parser.add_argument(
        "--password",
        help="Director password (omit to be prompted securely)",
    )
    parser.add_argument("--office-id", default=None, help="Optional office id")
    parser.add_argument("--phone-number", default=None, help="Optional phone number")
    return parser.parse_args(argv)


def create_director(
    db_url: str,
    *,
    email: str,
    password: str,
    full_name: str,
    office_id: str | None = None,
    phone_number: str | None = None,
) -> bool:
    """Crea principal + perfil aprobado. Retorna False si el email ya existe."""
    with psycopg.connect(db_url) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT id FROM auth_principals WHERE email = %s", (email,))
            row = cur.fetchone()
            if row:
                print(f"Principal already exists: id={row[0]} email={email}")
                return False

            director_id = uuid4()
            cur.execute(
                """
                INSERT INTO auth_principals
                    (id, email, password_hash, email_confirmed_at)
                VALUES (%s, %s, %s, now())
                """,
                (director_id, email, hash_password(password)),
            )
            # R: Un director se auto-aprueba (no hay nadie por encima).
            cur.execute(
                """
                INSERT INTO users
                    (id, email, full_name, role, phone_number, office_id,
                     is_lead, status, approval_status, added_time,
                     approved_by, approved_time)
                VALUES (%s, %s, %s, %s, %s, %s, false, %s, %s, now(), %s, now())
                """,
                (
                    director_id,
                    email,
                    full_name,
                    UserRole.DIRECTOR.value,
                    phone_number,
                    office_id,
                    UserStatus.ACTIVE.value,
                    ApprovalStatus.APPROVED.value,
                    director_id,
                ),
            )
        conn.commit()

    print(f"Created director: id={director_id} email={email}")
    return True


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    db_url = _require_database_url()
    email = normalize_email(args.email)
    full_name = args.full_name.strip()
    if not email or not full_name:
        raise SystemExit("Email and full name are required.")
    password = args.password or _prompt_password()
    create_director(
        db_url,
        email=email,
        password=password,
        full_name=full_name,
        office_id=args.office_id,
        phone_number=args.phone_number,
    )


if __name__ == "__main__":
    main()
