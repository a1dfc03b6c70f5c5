from __future__ import annotations

from fastapi import APIRouter, Depends

from quotagate.core.rate_limit import enforce_rate_limit

router = APIRouter(tags=["Protected"])


@router.get("/", dependencies=[Depends(enforce_rate_limit)])
async def hello() -> dict:
    """Sample endpoint guarded by the request quota."""

    return {"message": "Hello, World!"}
