from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from employee_records.core.config import settings
from employee_records.core.dependencies import get_current_user
from employee_records.models.auth import UserInfo

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(request: Request):
    services: dict[str, str] = {}

    store = getattr(request.app.state, "employee_store", None)
    try:
        if store is not None and store.connected:
            ok = await store.check_connection()
            services["document_store"] = "ok" if ok else "error"
        else:
            services["document_store"] = "not_configured"
    except Exception:
        services["document_store"] = "error"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/protected")
async def health_protected(user: UserInfo = Depends(get_current_user)):
    return {"status": "ok", "user": user.model_dump()}


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
