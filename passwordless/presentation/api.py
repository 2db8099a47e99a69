from fastapi import APIRouter

from passwordless.presentation.routers.v1.verification import router as verification_router
from passwordless.presentation.routes.health import router as health_router

api = APIRouter()
api.include_router(health_router)

# Add all v1 routers here
routers = (verification_router,)
for router in routers:
    api.include_router(router, prefix="/v1")
