"""Health check route."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from saasboard.utils import now_utc

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    database_ok = await request.app.state.db.health_check()
    return JSONResponse(
        {
            "status": "OK" if database_ok else "DEGRADED",
            "database": database_ok,
            "timestamp": now_utc().isoformat(),
        },
        status_code=200 if database_ok else 503,
    )
