from fastapi import APIRouter

from .admin_auth import admin_auth_router
from .admin_merchant import admin_merchant_router
from .health import health_router
from .merchant import merchant_router

router = APIRouter()

router.include_router(health_router, tags=["Health"])
router.include_router(merchant_router, tags=["Merchants"])
router.include_router(admin_merchant_router, tags=["Admin Merchants"])
router.include_router(admin_auth_router, tags=["Admin Auth"])
