"""Profile store DB access: process-wide connection pool."""

from .pool import (
    DatabasePoolError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
    close_pool,
    get_pool,
    init_pool,
    init_pool_from_settings,
    is_pool_initialized,
)

__all__ = [
    "init_pool",
    "init_pool_from_settings",
    "get_pool",
    "close_pool",
    "is_pool_initialized",
    "DatabasePoolError",
    "PoolAlreadyInitializedError",
    "PoolNotInitializedError",
]
