from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Iterable

from ..config import DEFAULT_MATCHING_CONFIG
from ..schemas import (
    AffinityResult,
    FilteredQuest,
    FilterResult,
    MatchingFilters,
    Quest,
    QuestConstraints,
    QuestPersonalityAffinity,
    TopMatch,
)
from .quest_store import fetch_affinities_by_quest, fetch_constraints_by_quest, fetch_open_quests

logger = logging.getLogger(__name__)


def calculate_age(birthdate: date, today: date | None = None) -> int:
    today = today or date.today()
    age = today.year - birthdate.year
    if (today.month, today.day) < (birthdate.month, birthdate.day):
        age -= 1
    return age


def passes_hard_filter(
    constraints: QuestConstraints | None,
    filters: MatchingFilters,
    today: date | None = None,
    cfg: dict[str, Any] | None = None,
) -> FilterResult:
    """Decide whether a quest may be shown at all.

    Constraints are exclusions only; ranking happens in calculate_affinity_score.
    A quest without a constraints row has nothing to exclude on.
    """
    if constraints is None:
        return FilterResult(passes=True)
    cfg = cfg or DEFAULT_MATCHING_CONFIG

    if filters.alcohol_preference == "no_alcohol" and constraints.alcohol == "primary":
        return FilterResult(passes=False, reason="Excludes drinking-focused quests")

    if filters.birthdate is not None:
        age = calculate_age(filters.birthdate, today)
        if constraints.age_requirement == "21_plus" and age < int(cfg.get("MIN_AGE_21_PLUS", 21)):
            return FilterResult(passes=False, reason="Age requirement not met (21+)")
        if constraints.age_requirement == "18_plus" and age < int(cfg.get("MIN_AGE_18_PLUS", 18)):
            return FilterResult(passes=False, reason="Age requirement not met (18+)")

    if filters.accessibility_needed and constraints.accessibility_level == "not_wheelchair_friendly":
        return FilterResult(passes=False, reason="Not accessible")

    # One-directional: a "high" preference never excludes a low-intensity quest.
    if filters.physical_preference == "low" and constraints.physical_intensity == "high":
        return FilterResult(passes=False, reason="Physical intensity too high")

    return FilterResult(passes=True)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_affinity_score(
    affinities: list[QuestPersonalityAffinity],
    user_traits: dict[str, float],
    cfg: dict[str, Any] | None = None,
) -> AffinityResult:
    cfg = cfg or DEFAULT_MATCHING_CONFIG
    neutral = int(cfg.get("NEUTRAL_MATCH_SCORE", 50))
    if not affinities or not user_traits:
        return AffinityResult(score=neutral)

    score_sum = 0.0
    weight_sum = 0.0
    top: tuple[float, TopMatch] | None = None

    for affinity in affinities:
        user_weight = user_traits.get(affinity.trait_key)
        if user_weight is None:
            continue
        contribution = affinity.trait_weight * float(user_weight) / 100.0
        score_sum += contribution
        weight_sum += affinity.trait_weight

        if top is None or contribution > top[0]:
            explanation = affinity.explanation or f"Great for {affinity.trait_key} types"
            top = (contribution, TopMatch(trait=affinity.trait_key, explanation=explanation))

    if weight_sum <= 0:
        return AffinityResult(score=neutral, top_match=top[1] if top else None)

    raw = (score_sum / weight_sum) * 100.0
    score = _round_half_up(min(100.0, max(0.0, raw)))
    return AffinityResult(score=score, top_match=top[1] if top else None)


def _rank_key(quest: FilteredQuest) -> tuple[int, int, float]:
    if quest.start_datetime is None:
        return (-quest.match_score, 1, 0.0)
    return (-quest.match_score, 0, quest.start_datetime.timestamp())


def rank_filtered_quests(quests: Iterable[FilteredQuest]) -> list[FilteredQuest]:
    return sorted(quests, key=_rank_key)


def build_filtered_quests(
    quests: list[Quest],
    constraints_by_quest: dict[str, QuestConstraints],
    affinities_by_quest: dict[str, list[QuestPersonalityAffinity]],
    filters: MatchingFilters,
    user_traits: dict[str, float],
    today: date | None = None,
    cfg: dict[str, Any] | None = None,
) -> list[FilteredQuest]:
    survivors: list[FilteredQuest] = []
    excluded: dict[str, int] = {}

    for quest in quests:
        constraints = constraints_by_quest.get(quest.id)
        affinities = affinities_by_quest.get(quest.id, [])

        verdict = passes_hard_filter(constraints, filters, today=today, cfg=cfg)
        if not verdict.passes:
            excluded[verdict.reason or "unknown"] = excluded.get(verdict.reason or "unknown", 0) + 1
            continue

        affinity = calculate_affinity_score(affinities, user_traits, cfg=cfg)
        survivors.append(
            FilteredQuest(
                **quest.model_dump(),
                constraints=constraints,
                affinities=affinities,
                match_score=affinity.score,
                match_reason=affinity.top_match.explanation if affinity.top_match else None,
            )
        )

    if excluded:
        logger.debug("[matching] excluded quests by reason=%s", excluded)
    return rank_filtered_quests(survivors)


def fetch_filtered_quests(
    db,
    filters: MatchingFilters,
    user_traits: dict[str, float],
    today: date | None = None,
) -> list[FilteredQuest]:
    quests = fetch_open_quests(db)
    if not quests:
        return []

    quest_ids = [q.id for q in quests]
    constraints_by_quest = fetch_constraints_by_quest(db, quest_ids)
    affinities_by_quest = fetch_affinities_by_quest(db, quest_ids)

    ranked = build_filtered_quests(quests, constraints_by_quest, affinities_by_quest, filters, user_traits, today=today)
    logger.info("[matching] candidates=%s passed=%s", len(quests), len(ranked))
    return ranked
