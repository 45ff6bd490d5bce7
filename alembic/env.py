"""
============================================================
TARJETA CRC — alembic/env.py
============================================================
Responsibilities:
  - Correr las migraciones del esquema de altas (auth_principals, users,
    activity_logs) online u offline.
  - Tomar la URL de la misma fuente que la API: Settings.database_url
    (DATABASE_URL / .env), con override `alembic -x db_url=...`.

Collaborators:
  - provisioning.crosscutting.config.get_settings
  - SQLAlchemy (create_engine, driver psycopg 3)

Policy:
  - Sin ORM: target_metadata=None, migraciones escritas a mano.
============================================================
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from provisioning.crosscutting.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

_PSYCOPG_SCHEMES = ("postgresql://", "postgres://")


def database_url() -> str:
    """URL SQLAlchemy (postgresql+psycopg://) para el esquema de altas."""
    raw = context.get_x_argument(as_dictionary=True).get("db_url") or (
        get_settings().database_url
    )
    for scheme in _PSYCOPG_SCHEMES:
        if raw.startswith(scheme):
            return "postgresql+psycopg://" + raw[len(scheme):]
    return raw


if context.is_offline_mode():
    context.configure(
        url=database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=None)
        with context.begin_transaction():
            context.run_migrations()
