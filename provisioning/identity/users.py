"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Catálogos de Usuario (roles y estados)

Responsabilidades:
    - Definir el enum de roles de la jerarquía (director / manager / employee).
    - Definir los estados de cuenta y de aprobación.
    - Mantener los valores persistidos centralizados y estables.

Colaboradores:
    - domain/entities.py: UserProfile usa estos enums.
    - domain/provisioning_policy.py: matriz de roles y derivación de estados.
    - infrastructure/repositories/postgres/user_profile.py: mapea filas -> enums.

Notas:
    - Este módulo NO contiene lógica de negocio: solo catálogos.
    - Los valores son los persistidos en la tabla `users` (CHECK constraints).
===============================================================================
"""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Roles de la jerarquía organizacional."""

    DIRECTOR = "director"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    @classmethod
    def parse(cls, value: object) -> "UserRole | None":
        """Convierte un valor crudo a UserRole; None si no es un rol válido."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class UserStatus(str, Enum):
    """Estado operativo de la cuenta."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING_APPROVAL = "pending_approval"


class ApprovalStatus(str, Enum):
    """Estado de aprobación por un director."""

    APPROVED = "approved"
    PENDING = "pending"
