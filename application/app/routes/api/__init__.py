from fastapi import APIRouter
from app.routes.api.promotions import api_router as promotions_router

api_router = APIRouter(tags=["api"])
api_router.include_router(promotions_router)

__all__ = ["api_router"]
