from fastapi import APIRouter
from gasrefill.modules.cylinders.router import router as cylinders_router
from gasrefill.modules.refill.router import router as refill_router
from gasrefill.modules.transactions.router import router as transactions_router

api_router = APIRouter()

# Include module routers
api_router.include_router(cylinders_router)
api_router.include_router(refill_router)
api_router.include_router(transactions_router)
