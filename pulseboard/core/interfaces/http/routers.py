"""API router configuration."""

from fastapi import APIRouter

from pulseboard.modules.gateway.interfaces.router import router as gateway_router

api_router = APIRouter()

# Gateway (news / trends / finance / reddit / maps / chat)
api_router.include_router(gateway_router)
