from fastapi import APIRouter

from leave_api.api.employees import employees_router
from leave_api.api.leaves import leaves_router
from leave_api.api.notifications import notifications_router
from leave_api.api.reports import reports_router

api_router = APIRouter()
api_router.include_router(employees_router)
api_router.include_router(leaves_router)
api_router.include_router(notifications_router)
api_router.include_router(reports_router)
