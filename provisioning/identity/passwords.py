"""
===============================================================================
TARJETA CRC — identity/passwords.py
===============================================================================

Responsabilidades:
    - Hashear passwords (Argon2) antes de que lleguen al identity provider.

Colaboradores:
    - infrastructure/repositories/postgres/principal.py
    - scripts/create_director.py

Notas:
    - La política de passwords (largo, complejidad) NO se aplica acá.
===============================================================================
"""

from __future__ import annotations

from argon2 import PasswordHasher

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2."""
    return _password_hasher.hash(password)
