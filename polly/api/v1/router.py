"""Main API router for v1."""
from fastapi import APIRouter, Depends

from polly.api.deps import enforce_login
from polly.api.v1.endpoints import admin, auth, csrf, polls

api_router = APIRouter(prefix="/api/v1")

# Public: login and registration must be reachable without a session
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Everything else redirects anonymous callers to the login page
protected = [Depends(enforce_login)]
api_router.include_router(csrf.router, tags=["Security"], dependencies=protected)
api_router.include_router(polls.router, prefix="/polls", tags=["Polls"], dependencies=protected)
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"], dependencies=protected)
