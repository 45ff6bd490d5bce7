"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .activity_log import InMemoryActivityLogRepository
from .principal import InMemoryIdentityProvider
from .user_profile import InMemoryUserProfileRepository

__all__ = [
    "InMemoryIdentityProvider",
    "InMemoryUserProfileRepository",
    "InMemoryActivityLogRepository",
]
