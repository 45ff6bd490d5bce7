"""
Users use cases (subordinate account provisioning).

    from provisioning.application.usecases.users import CreateUserUseCase
"""

from .create_user import CreateUserInput, CreateUserUseCase
from .provisioning_saga import ProvisioningSaga, SagaOutcome, SagaResult
from .user_results import CreateUserResult, UserError, UserErrorCode

__all__ = [
    "CreateUserInput",
    "CreateUserUseCase",
    "CreateUserResult",
    "UserError",
    "UserErrorCode",
    "ProvisioningSaga",
    "SagaOutcome",
    "SagaResult",
]
