"""
===============================================================================
ARCHIVO: crosscutting/metrics.py
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Métricas (Prometheus)

Responsabilidades:
    - Definir métricas HTTP y de aprovisionamiento en un registry propio.
    - Proveer funciones pequeñas y estables para registrar eventos/duraciones.
    - Cuidar cardinalidad (NO user_id, NO emails, NO office_id).
    - Exponer helpers para generar la respuesta /metrics.

Colaboradores:
    - crosscutting.middleware: registra latencia y conteo HTTP.
    - application/usecases/create_user.py: registra el outcome de cada alta.
    - api/main.py: endpoint /metrics.
===============================================================================
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

# ------------------------
# HTTP
# ------------------------
_requests_total = Counter(
    "provisioning_requests_total",
    "Total de requests HTTP",
    ["endpoint", "method", "status"],
    registry=_registry,
)

_request_latency = Histogram(
    "provisioning_request_latency_seconds",
    "Latencia de requests HTTP (segundos)",
    ["endpoint", "method"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=_registry,
)

# ------------------------
# Aprovisionamiento
# ------------------------
_user_provisioning_total = Counter(
    "provisioning_user_outcomes_total",
    "Resultado de altas de usuario",
    ["outcome"],
    registry=_registry,
)

PROVISIONING_OUTCOMES = frozenset(
    {
        "approved",
        "pending",
        "rejected",
        "invalid",
        "upstream_error",
        "rolled_back",
        "rollback_failed",
    }
)


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """Registra métricas HTTP (status agrupado por 2xx/4xx/5xx)."""
    status_bucket = _status_bucket(status_code)
    _requests_total.labels(endpoint=endpoint, method=method, status=status_bucket).inc()
    _request_latency.labels(endpoint=endpoint, method=method).observe(latency_seconds)


def record_provisioning_outcome(outcome: str) -> None:
    """Cuenta el resultado de un alta. Outcomes desconocidos -> "other"."""
    label = outcome if outcome in PROVISIONING_OUTCOMES else "other"
    _user_provisioning_total.labels(outcome=label).inc()


def _status_bucket(code: int) -> str:
    return f"{code // 100}xx" if 100 <= code < 600 else "5xx"


def get_metrics_response() -> tuple[bytes, str]:
    """Genera el body y content-type para /metrics."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST
