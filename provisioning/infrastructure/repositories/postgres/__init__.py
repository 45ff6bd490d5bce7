"""
PostgreSQL Repository Implementations.

Production implementations using psycopg (raw, parameterized SQL).
"""

from .activity_log import PostgresActivityLogRepository
from .principal import PostgresIdentityProvider
from .user_profile import PostgresUserProfileRepository

__all__ = [
    "PostgresIdentityProvider",
    "PostgresUserProfileRepository",
    "PostgresActivityLogRepository",
]
