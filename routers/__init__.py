# routers/__init__.py

from fastapi import APIRouter

from .permissions import router as permissions_router
from .facility_roles import router as facility_roles_router
from .conditional_permissions import router as conditional_permissions_router
from .admin import router as admin_router
from .facilities import router as facilities_router
from .products import router as products_router
from .health import router as health_router


# Master router for mounting the whole API under a prefix
api_router = APIRouter()

api_router.include_router(permissions_router)
api_router.include_router(facility_roles_router)
api_router.include_router(conditional_permissions_router)
api_router.include_router(admin_router)
api_router.include_router(facilities_router)
api_router.include_router(products_router)
api_router.include_router(health_router)

__all__ = ["api_router"]
