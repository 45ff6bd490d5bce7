"""
============================================================
TARJETA CRC
============================================================
Class: provisioning.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer los adapters concretos (Postgres e InMemory) del identity
  provider, el profile store y el activity log en un único punto.

Collaborators:
- Repositorios Postgres (SQL crudo con psycopg)
- Repositorios InMemory (testing / APP_ENV=test)
============================================================
"""

from .in_memory import (
    InMemoryActivityLogRepository,
    InMemoryIdentityProvider,
    InMemoryUserProfileRepository,
)
from .postgres import (
    PostgresActivityLogRepository,
    PostgresIdentityProvider,
    PostgresUserProfileRepository,
)

__all__ = [
    # Postgres
    "PostgresIdentityProvider",
    "PostgresUserProfileRepository",
    "PostgresActivityLogRepository",
    # In-memory
    "InMemoryIdentityProvider",
    "InMemoryUserProfileRepository",
    "InMemoryActivityLogRepository",
]
