from __future__ import annotations

from typing import Any

from sqlalchemy import bindparam, text

from ..config import FEED_QUEST_STATUS, FEED_REVIEW_STATUS
from ..schemas import Quest, QuestConstraints, QuestPersonalityAffinity


def _with_string_ids(row: Any, keys: tuple[str, ...] = ("id", "quest_id")) -> dict[str, Any]:
    out = dict(row)
    for key in keys:
        if out.get(key) is not None:
            out[key] = str(out[key])
    return out


def fetch_open_quests(
    db,
    status: str = FEED_QUEST_STATUS,
    review_status: str = FEED_REVIEW_STATUS,
) -> list[Quest]:
    rows = db.execute(
        text(
            """
            SELECT
              q.id,
              q.slug,
              q.title,
              q.icon,
              q.short_teaser,
              q.start_datetime,
              q.end_datetime,
              q.meeting_location_name,
              q.capacity_total,
              q.status,
              q.review_status,
              q.sponsor_name
            FROM quests q
            WHERE q.status = :status
              AND q.review_status = :review_status
            ORDER BY q.start_datetime ASC NULLS LAST
            """
        ),
        {"status": status, "review_status": review_status},
    ).mappings().all()
    return [Quest(**_with_string_ids(r)) for r in rows]


def fetch_constraints_by_quest(db, quest_ids: list[str]) -> dict[str, QuestConstraints]:
    if not quest_ids:
        return {}
    stmt = text(
        """
        SELECT quest_id, alcohol, age_requirement, physical_intensity, social_intensity,
               noise_level, time_of_day, indoor_outdoor, accessibility_level, budget_level
        FROM quest_constraints
        WHERE CAST(quest_id AS text) IN :quest_ids
        """
    ).bindparams(bindparam("quest_ids", expanding=True))
    rows = db.execute(stmt, {"quest_ids": [str(q) for q in quest_ids]}).mappings().all()

    out: dict[str, QuestConstraints] = {}
    for r in rows:
        constraints = QuestConstraints(**_with_string_ids(r))
        out[constraints.quest_id] = constraints
    return out


def fetch_affinities_by_quest(db, quest_ids: list[str]) -> dict[str, list[QuestPersonalityAffinity]]:
    if not quest_ids:
        return {}
    stmt = text(
        """
        SELECT quest_id, trait_key, trait_weight, explanation
        FROM quest_personality_affinity
        WHERE CAST(quest_id AS text) IN :quest_ids
        """
    ).bindparams(bindparam("quest_ids", expanding=True))
    rows = db.execute(stmt, {"quest_ids": [str(q) for q in quest_ids]}).mappings().all()

    out: dict[str, list[QuestPersonalityAffinity]] = {}
    for r in rows:
        affinity = QuestPersonalityAffinity(**_with_string_ids(r))
        out.setdefault(affinity.quest_id, []).append(affinity)
    return out
