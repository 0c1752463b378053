import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text

from app.database import SessionLocal
from app.services.events import log_product_event
from app.services.state_machine import plan_status_transition

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def get_profile(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(
            text(
                """
                SELECT id, email, display_name, preferences, birthdate
                FROM profiles
                WHERE id = CAST(:id AS uuid)
                """
            ),
            {"id": user_id},
        ).mappings().first()
    if not row:
        return None
    out = dict(row)
    out["id"] = str(out["id"])
    if not isinstance(out.get("preferences"), dict):
        out["preferences"] = {}
    return out


def get_user_roles(user_id: str) -> list[str]:
    with SessionLocal() as db:
        rows = db.execute(
            text("SELECT role FROM user_roles WHERE user_id = CAST(:user_id AS uuid) ORDER BY role"),
            {"user_id": user_id},
        ).mappings().all()
    return [str(r["role"]) for r in rows]


def get_quest_status(quest_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(
            text("SELECT id, title, status, previous_status FROM quests WHERE id = CAST(:id AS uuid)"),
            {"id": quest_id},
        ).mappings().first()
    if not row:
        return None
    out = dict(row)
    out["id"] = str(out["id"])
    return out


def transition_quest_status(
    quest_id: str,
    target: str,
    reason: str | None = None,
    actor_user_id: str | None = None,
) -> dict[str, Any] | None:
    now = _now_utc()
    with SessionLocal() as db:
        row = db.execute(
            text("SELECT id, status FROM quests WHERE id = CAST(:id AS uuid) FOR UPDATE"),
            {"id": quest_id},
        ).mappings().first()
        if not row:
            return None

        current = str(row["status"])
        update = plan_status_transition(current, target, reason, now)
        assignments = ", ".join(f"{col} = :{col}" for col in update)
        db.execute(
            text(f"UPDATE quests SET {assignments}, updated_at = :updated_at WHERE id = CAST(:id AS uuid)"),
            {**update, "updated_at": now, "id": quest_id},
        )
        log_product_event(
            db,
            event_name="quest_status_changed",
            user_id=actor_user_id,
            quest_id=quest_id,
            properties={"before": current, "after": target, "reason": reason},
        )
        db.commit()

    logger.info("[quests] status quest_id=%s %s -> %s actor=%s", quest_id, current, target, actor_user_id)
    return {"id": quest_id, "status": target, "previous_status": current}
