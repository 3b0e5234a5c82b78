# storefront/api/__init__.py
from fastapi import APIRouter

from storefront.api.routers import (
    admin_products,
    admin_transactions,
    admin_users,
    auth,
    carts,
    catalog,
    health,
    histories,
    methods,
    products,
    profiles,
    transactions,
)

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(profiles.router)
api_router.include_router(products.router)
for catalog_router in catalog.routers:
    api_router.include_router(catalog_router)
api_router.include_router(methods.router)
api_router.include_router(carts.router)
api_router.include_router(transactions.router)
api_router.include_router(histories.router)
api_router.include_router(admin_transactions.router)
api_router.include_router(admin_products.router)
api_router.include_router(admin_users.router)
