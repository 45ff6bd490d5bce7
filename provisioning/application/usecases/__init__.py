"""
Use Cases Layer (Business Operations)

Structure
---------
usecases/
└── users/      # Subordinate account provisioning

Usage
-----
    from provisioning.application.usecases import CreateUserUseCase
"""

from .users import (
    CreateUserInput,
    CreateUserResult,
    CreateUserUseCase,
    SagaOutcome,
    UserError,
    UserErrorCode,
)

__all__ = [
    "CreateUserInput",
    "CreateUserResult",
    "CreateUserUseCase",
    "SagaOutcome",
    "UserError",
    "UserErrorCode",
]
