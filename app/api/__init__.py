# app/api/__init__.py
from fastapi import APIRouter
from app.api.routers import orders
from app.api.routers.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(orders.router)
