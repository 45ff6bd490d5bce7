"""
===============================================================================
TARJETA CRC — provisioning/interfaces/api/http/routers/__init__.py
===============================================================================

Name:
    Routers Package (HTTP)

Responsibilities:
    - Exponer los routers del servicio para ser incluidos por el router
      principal (/v1) y por la app (ruta de compatibilidad).

Collaborators:
    - routers.users
===============================================================================
"""

from .users import compat_router, router

__all__ = ["router", "compat_router"]
