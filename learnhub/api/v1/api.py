from fastapi import APIRouter
from .endpoints import (
    auth_router,
    module_router,
    step_router,
    quiz_router,
    pathway_router,
    admin_router,
)

api_router = APIRouter()

api_router.include_router(auth_router.router, prefix="/auth", tags=["Auth"])
api_router.include_router(module_router.router, prefix="/modules", tags=["Modules"])
api_router.include_router(step_router.router, prefix="/steps", tags=["Steps"])
api_router.include_router(quiz_router.router, prefix="/quiz-attempts", tags=["Quiz"])
api_router.include_router(pathway_router.router, prefix="/pathways", tags=["Pathways"])
api_router.include_router(admin_router.router, prefix="/admin", tags=["Admin"])
