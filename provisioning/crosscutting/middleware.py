"""
===============================================================================
MÓDULO: Middleware HTTP de contexto
===============================================================================

RequestContextMiddleware abre el contexto de cada request del servicio de
altas: request_id (X-Request-Id aceptado o generado), método y path. Al
terminar emite una línea de log con status, latencia y caller (si el token
fue válido) y registra las métricas HTTP.

Colaboradores:
  - provisioning/context.py
  - crosscutting/metrics.py
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import clear_context, set_request_context
from .logger import logger
from .metrics import record_request_metrics

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 128

# R: probes y scraping no generan log por request (sí métricas).
_UNLOGGED_PATHS = frozenset({"/healthz", "/metrics"})


def resolve_request_id(incoming: str | None) -> str:
    """Reusa el X-Request-Id del cliente si es razonable; si no, genera uno."""
    candidate = (incoming or "").strip()
    if candidate and len(candidate) <= MAX_REQUEST_ID_LENGTH:
        return candidate
    return str(uuid.uuid4())


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Contexto + log de cierre + métricas por request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            logger.exception("Request failed before a response was produced")
            raise
        finally:
            elapsed = time.perf_counter() - started
            record_request_metrics(
                endpoint=_route_template(request),
                method=request.method,
                status_code=status_code,
                latency_seconds=elapsed,
            )
            if request.url.path not in _UNLOGGED_PATHS:
                principal = getattr(request.state, "principal", None)
                logger.info(
                    "Request completed",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round(elapsed * 1000, 2),
                        "authenticated": principal is not None,
                    },
                )
            clear_context()
