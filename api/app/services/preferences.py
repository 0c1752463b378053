from __future__ import annotations

from datetime import date
from typing import Any

from ..schemas import MatchingFilters


def _section(preferences: dict[str, Any] | None, key: str) -> dict[str, Any]:
    value = (preferences or {}).get(key)
    return value if isinstance(value, dict) else {}


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _vibe(preferences: dict[str, Any] | None) -> float | None:
    raw = _section(preferences, "social_style").get("vibe_preference")
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def matching_filters_from_preferences(
    preferences: dict[str, Any] | None,
    birthdate: date | None = None,
) -> MatchingFilters:
    """Translate the onboarding preference blob into hard-filter inputs."""
    if not isinstance(preferences, dict) or not preferences:
        return MatchingFilters(birthdate=birthdate)

    interests = _section(preferences, "interests")
    constraints = _str_list(_section(preferences, "availability").get("constraints"))
    values: dict[str, Any] = {"birthdate": birthdate}

    if "drinking_focused" in _str_list(interests.get("not_my_thing")):
        values["alcohol_preference"] = "no_alcohol"

    if "accessibility_needs" in constraints:
        values["accessibility_needed"] = True

    vibe = _vibe(preferences)
    if vibe is not None:
        if vibe <= 2:
            values["social_preference"] = "chill"
        elif vibe >= 4:
            values["social_preference"] = "high"
        else:
            values["social_preference"] = "moderate"

    if "prefer_seated" in constraints:
        values["physical_preference"] = "low"
    elif "prefer_active" in constraints:
        values["physical_preference"] = "high"

    return MatchingFilters(**values)


def user_traits_from_preferences(preferences: dict[str, Any] | None) -> dict[str, float]:
    if not isinstance(preferences, dict) or not preferences:
        return {}

    social = _section(preferences, "social_style")
    traits: dict[str, float] = {}

    energy = social.get("post_event_energy")
    if energy == "energized":
        traits["extroversion_fit"] = 80
        traits["high_social_anxiety_support"] = 20
    elif energy == "drained":
        traits["introversion_fit"] = 80
        traits["high_social_anxiety_support"] = 60

    vibe = _vibe(preferences)
    if vibe is not None:
        if vibe <= 2:
            traits["reflective"] = 70
            traits["low_social_anxiety"] = 30
        elif vibe >= 4:
            traits["competitive"] = 60
            traits["extroversion_fit"] = 70

    tendency = _str_list(social.get("group_tendency"))
    if "help_facilitate" in tendency:
        traits["group_leadership"] = 80
        traits["connector"] = 70
    if "mostly_listen" in tendency:
        traits["reflective"] = 70
        traits["introversion_fit"] = 60

    quest_types = _str_list(_section(preferences, "interests").get("quest_types"))
    if "arts_creative" in quest_types:
        traits["creative"] = 80
    if "outdoors" in quest_types:
        traits["adventurous"] = 70
    if "food_drink" in quest_types:
        traits["foodie"] = 80

    if "new_to_city" in _str_list(preferences.get("context_tags")):
        traits["novelty_seeking"] = 70

    return traits
