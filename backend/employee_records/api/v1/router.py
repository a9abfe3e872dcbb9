from fastapi import APIRouter

from employee_records.api.v1.endpoints import employees, health

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(employees.router)
