"""Readiness checks for the service, its data store and the command model."""

import time

from fastapi import APIRouter

from intellectory import __version__
from intellectory.application.dto.responses import HealthResponse, ProviderHealthResponse
from intellectory.config import get_settings
from intellectory.core.exceptions import IntellectoryError

router = APIRouter(prefix="/api/health", tags=["health"])

_started = time.monotonic()


def _report(status: str, **providers: ProviderHealthResponse) -> HealthResponse:
    return HealthResponse(
        status=status,
        version=__version__,
        uptime_seconds=time.monotonic() - _started,
        **providers,
    )


def _elapsed_ms(since: float) -> float:
    return (time.perf_counter() - since) * 1000


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return _report("healthy")


@router.get("/llm", response_model=HealthResponse)
async def llm_health() -> HealthResponse:
    """Ask the configured provider for its health. A down model only degrades the service."""
    from intellectory.infrastructure.llm import get_llm_provider

    name = get_settings().llm.provider
    since = time.perf_counter()
    try:
        result = await get_llm_provider().check_health()
    except (IntellectoryError, ValueError) as e:
        report = ProviderHealthResponse(name=name, available=False, error=str(e))
    else:
        report = ProviderHealthResponse(
            name=name,
            available=result.available,
            latency_ms=_elapsed_ms(since),
            error=result.error,
        )
    return _report("healthy" if report.available else "degraded", llm=report)


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Ping the table client; without a reachable store the service is unhealthy."""
    from intellectory.infrastructure.storage import get_table_client

    backend = get_settings().storage.backend
    since = time.perf_counter()
    try:
        await get_table_client().ping()
    except IntellectoryError as e:
        report = ProviderHealthResponse(name=backend, available=False, error=e.message)
    else:
        report = ProviderHealthResponse(name=backend, available=True, latency_ms=_elapsed_ms(since))
    return _report("healthy" if report.available else "unhealthy", database=report)
