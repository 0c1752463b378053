from datetime import date, datetime
from typing import Annotated, Any, Literal
from pydantic import BaseModel, ConfigDict, Field

AlcoholLevel = Literal["none", "optional", "primary"]
AgeRequirement = Literal["all_ages", "18_plus", "21_plus"]
IntensityLevel = Literal["low", "medium", "high"]
SocialIntensity = Literal["chill", "moderate", "high"]
AccessibilityLevel = Literal["unknown", "wheelchair_friendly", "not_wheelchair_friendly", "mixed"]
QuestStatus = Literal["draft", "open", "closed", "completed", "cancelled", "paused", "revoked"]
TraitWeight = Annotated[float, Field(ge=0, le=100, allow_inf_nan=False)]


class Quest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    slug: str | None = None
    icon: str | None = None
    short_teaser: str | None = None
    start_datetime: datetime | None = None
    end_datetime: datetime | None = None
    meeting_location_name: str | None = None
    capacity_total: int = 6
    status: str = "open"
    review_status: str = "approved"
    sponsor_name: str | None = None


class QuestConstraints(BaseModel):
    model_config = ConfigDict(extra="ignore")

    quest_id: str
    alcohol: AlcoholLevel = "none"
    age_requirement: AgeRequirement = "all_ages"
    physical_intensity: IntensityLevel = "medium"
    social_intensity: SocialIntensity = "moderate"
    noise_level: str = "moderate"
    time_of_day: str = "flex"
    indoor_outdoor: str = "mixed"
    accessibility_level: AccessibilityLevel = "unknown"
    budget_level: str = "free"


class QuestPersonalityAffinity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    quest_id: str
    trait_key: str
    trait_weight: int = Field(default=50, ge=0, le=100)
    explanation: str | None = None


class MatchingFilters(BaseModel):
    alcohol_preference: Literal["no_alcohol", "ok_optional", "likes_drinking"] | None = None
    physical_preference: Literal["low", "medium", "high", "any"] | None = None
    social_preference: Literal["chill", "moderate", "high", "any"] | None = None
    accessibility_needed: bool = False
    birthdate: date | None = None


class FilterResult(BaseModel):
    passes: bool
    reason: str | None = None


class TopMatch(BaseModel):
    trait: str
    explanation: str


class AffinityResult(BaseModel):
    score: int
    top_match: TopMatch | None = None


class FilteredQuest(Quest):
    constraints: QuestConstraints | None = None
    affinities: list[QuestPersonalityAffinity] = Field(default_factory=list)
    match_score: int
    match_reason: str | None = None


class MatchQuestsRequest(BaseModel):
    filters: MatchingFilters = Field(default_factory=MatchingFilters)
    traits: dict[str, TraitWeight] = Field(default_factory=dict)


class QuestFeedResponse(BaseModel):
    quests: list[FilteredQuest]
    count: int
    filters: dict[str, Any]


class QuestStatusChangeRequest(BaseModel):
    status: QuestStatus
    reason: str | None = None
