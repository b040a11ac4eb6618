"""API routes for RuleChart backend."""

from fastapi import APIRouter

from backend.routes import monitoring, rules, translate

api_router = APIRouter(prefix="/api", tags=["api"])

api_router.include_router(monitoring.router)
api_router.include_router(rules.router, prefix="/rules", tags=["rules"])
api_router.include_router(translate.router, prefix="/translate", tags=["translate"])
