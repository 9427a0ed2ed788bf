"""
API Router Module - Aggregates all endpoint routers into a public and a protected group
"""
from fastapi import APIRouter, Depends

from magicstream.api.endpoints import auth, health, movies
from magicstream.core.security import require_authenticated_user

# Routes reachable without credentials
public_router = APIRouter()
public_router.include_router(health.router, tags=["Health"])
public_router.include_router(auth.router, tags=["Auth"])
public_router.include_router(movies.router, tags=["Movies"])

# Every route in this group runs the auth gate before its handler. Endpoint
# routers declare their routes with AuthGatedRoute so the gate also precedes
# body parsing; the dependency below covers any route declared without it.
protected_router = APIRouter(dependencies=[Depends(require_authenticated_user)])
protected_router.include_router(movies.protected_router, tags=["Movies"])
