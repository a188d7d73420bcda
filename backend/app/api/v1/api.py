from fastapi import APIRouter

from backend.app.api.v1.endpoints import (
    audit,
    daybook,
    expenses,
    parties,
    payments,
    pin,
    prices,
    products,
    purchases,
    receipts,
    reports,
    supplies,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(parties.router, prefix="/parties", tags=["parties"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(prices.router, prefix="/prices", tags=["prices"])
api_router.include_router(purchases.router, prefix="/purchases", tags=["purchases"])
api_router.include_router(supplies.router, prefix="/supplies", tags=["supplies"])
api_router.include_router(receipts.router, prefix="/receipts", tags=["receipts"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(daybook.router, prefix="/daybook", tags=["daybook"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(pin.router, prefix="/pin", tags=["pin"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
