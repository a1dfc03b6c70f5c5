from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe; never touches the counter store."""

    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(request: Request) -> dict:
    """Readiness probe.

    Pings the counter store. A store failure surfaces as 503 through the
    CounterStoreError handler.
    """

    await request.app.state.counter_store.ping()
    return {"status": "ready"}
