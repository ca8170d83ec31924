# storefront/api/main.py

from fastapi import APIRouter
from .endpoints import contact, payments, receipts, health

# Create main API router
api_router = APIRouter()

# Contact form
api_router.include_router(contact.router, tags=["Contact"])

# Stripe checkout and payment verification
api_router.include_router(payments.router, tags=["Payments"])

# Order receipts
api_router.include_router(receipts.router, tags=["Receipts"])

# Health and diagnostics
api_router.include_router(health.router, tags=["Health"])
