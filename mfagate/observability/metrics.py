"""
Prometheus metrics for monitoring.
"""
from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

mfa_validations_counter = Counter(
    'mfa_validations_total', 'MFA validation outcomes per provider', ['provider', 'result']
)

metrics_router = APIRouter()


@metrics_router.get("/metrics")
async def get_metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
