from typing import Any

from fastapi import APIRouter, Depends

from .. import repo
from ..auth.deps import get_current_user
from ..services.auth_state import resolve_auth_state
from ..services.preferences import matching_filters_from_preferences, user_traits_from_preferences

router = APIRouter()
scaffold_router = APIRouter()


@scaffold_router.get("/health")
def profile_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "profile"}


@router.get("/me")
def get_me(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    user_id = str(current_user["id"])
    profile = repo.get_profile(user_id)
    preferences = (profile or {}).get("preferences") or {}
    filters = matching_filters_from_preferences(preferences, birthdate=(profile or {}).get("birthdate"))
    return {
        "id": user_id,
        "email": current_user.get("email"),
        "roles": current_user.get("roles") or [],
        "auth_state": resolve_auth_state(has_session=True, profile_loaded=profile is not None),
        "display_name": (profile or {}).get("display_name"),
        "matching_filters": filters.model_dump(mode="json"),
        "matching_traits": user_traits_from_preferences(preferences),
    }
