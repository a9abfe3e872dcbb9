from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from employee_records.api.v1.router import api_router
from employee_records.core.config import Settings, settings
from employee_records.services.employee_service import EmployeeService
from employee_records.stores.base import EmployeeStore
from employee_records.stores.cosmos import CosmosEmployeeStore
from employee_records.stores.inmemory import InMemoryEmployeeStore

logger = logging.getLogger(__name__)


def build_store(config: Settings) -> EmployeeStore:
    if config.STORE_BACKEND == "memory":
        return InMemoryEmployeeStore()
    if config.STORE_BACKEND != "cosmos":
        raise ValueError(f"Unknown STORE_BACKEND: {config.STORE_BACKEND!r}")
    return CosmosEmployeeStore()


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    store = build_store(settings)
    try:
        await store.connect(settings)
    except Exception:
        logger.exception("Failed to connect employee store — continuing without DB")
    application.state.employee_store = store
    application.state.employee_service = EmployeeService(store)
    yield
    await store.close()
    application.state.employee_service = None
    application.state.employee_store = None


app = FastAPI(
    title="Employee Records API",
    description="Employee records with change history",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        field = "body" if not loc or loc[0] == "body" else ".".join(loc)
        errors.append({"field": field, "message": error.get("msg", "Invalid request")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"message": "Validation failed", "errors": errors}},
    )


@app.get("/")
async def root():
    return {"message": "Employee Records API"}
