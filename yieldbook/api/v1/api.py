"""
V1 API router aggregation.

``main.py`` mounts this router at ``/api/v1``.
"""

from fastapi import APIRouter

from yieldbook.api.v1.endpoints import admin, investments, market, reports, users, withdrawals

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(withdrawals.router, prefix="/users", tags=["Withdrawals"])

# Defines its own full paths (/plans, /users/{user_id}/investments).
api_router.include_router(investments.router, tags=["Investments"])

api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(market.router, tags=["Market & Calendar"])
