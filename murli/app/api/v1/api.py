from fastapi import APIRouter

from murli.app.api.v1.endpoints import murli, translate

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(translate.router, prefix="/translate", tags=["translate"])
api_router.include_router(murli.router, prefix="/murli", tags=["murli"])
