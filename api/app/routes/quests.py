from typing import Any

from fastapi import APIRouter, Depends

from .. import repo
from ..auth.deps import get_current_user
from ..database import SessionLocal
from ..schemas import FilteredQuest, MatchingFilters, MatchQuestsRequest, QuestFeedResponse
from ..services.events import log_product_event
from ..services.matching import fetch_filtered_quests
from ..services.preferences import matching_filters_from_preferences, user_traits_from_preferences

router = APIRouter()
scaffold_router = APIRouter()


@scaffold_router.get("/health")
def quests_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "quests"}


def _run_pipeline(
    user_id: str,
    filters: MatchingFilters,
    traits: dict[str, float],
    event_name: str,
) -> list[FilteredQuest]:
    with SessionLocal() as db:
        quests = fetch_filtered_quests(db, filters, traits)
        log_product_event(
            db,
            event_name=event_name,
            user_id=user_id,
            properties={
                "count": len(quests),
                "top_quest_id": quests[0].id if quests else None,
                "trait_keys": sorted(traits),
            },
        )
        db.commit()
    return quests


@router.get("/quests/feed", response_model=QuestFeedResponse)
def get_quest_feed(current_user: dict[str, Any] = Depends(get_current_user)) -> QuestFeedResponse:
    user_id = str(current_user["id"])
    profile = repo.get_profile(user_id) or {}
    preferences = profile.get("preferences") or {}

    filters = matching_filters_from_preferences(preferences, birthdate=profile.get("birthdate"))
    traits = user_traits_from_preferences(preferences)
    quests = _run_pipeline(user_id, filters, traits, "quest_feed_viewed")
    return QuestFeedResponse(quests=quests, count=len(quests), filters=filters.model_dump(mode="json"))


@router.post("/quests/match", response_model=QuestFeedResponse)
def match_quests(
    payload: MatchQuestsRequest,
    current_user: dict[str, Any] = Depends(get_current_user),
) -> QuestFeedResponse:
    quests = _run_pipeline(str(current_user["id"]), payload.filters, payload.traits, "quest_match_requested")
    return QuestFeedResponse(quests=quests, count=len(quests), filters=payload.filters.model_dump(mode="json"))
