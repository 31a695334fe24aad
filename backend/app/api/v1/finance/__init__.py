"""
Finance API routers.

Provides endpoints for:
- Chapter cash and bank transactions
- Chapter balance recomputation
"""
from fastapi import APIRouter

from app.api.v1.finance.transactions import router as transactions_router

# Combined finance router
finance_router = APIRouter(tags=["finance"])

finance_router.include_router(
    transactions_router,
    tags=["transactions"]
)

__all__ = ["finance_router"]
