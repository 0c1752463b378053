from fastapi import APIRouter, FastAPI

from .admin import router as admin_router, scaffold_router as admin_scaffold_router
from .profile import router as profile_router, scaffold_router as profile_scaffold_router
from .quests import router as quests_router, scaffold_router as quests_scaffold_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(profile_router, tags=["users"])
    app.include_router(quests_router, tags=["quests"])
    app.include_router(admin_router, tags=["admin"])

    app.include_router(profile_scaffold_router, prefix="/_scaffold/profile", tags=["scaffold-profile"])
    app.include_router(quests_scaffold_router, prefix="/_scaffold/quests", tags=["scaffold-quests"])
    app.include_router(admin_scaffold_router, prefix="/_scaffold/admin", tags=["scaffold-admin"])


__all__ = ["include_modular_routers", "APIRouter"]
