import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import repo
from ..auth.deps import require_admin
from ..schemas import QuestStatusChangeRequest
from ..services.state_machine import QuestTransitionError, allowed_transitions

router = APIRouter()
scaffold_router = APIRouter()


@scaffold_router.get("/health")
def admin_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "admin"}


@router.get("/admin/quests/{quest_id}/transitions")
def get_quest_transitions(quest_id: uuid.UUID, admin_user: dict[str, Any] = Depends(require_admin)) -> dict[str, Any]:
    quest = repo.get_quest_status(str(quest_id))
    if not quest:
        raise HTTPException(status_code=404, detail="Quest not found")
    status = str(quest["status"])
    return {"quest_id": quest["id"], "status": status, "allowed": allowed_transitions(status)}


@router.post("/admin/quests/{quest_id}/status")
def change_quest_status(
    quest_id: uuid.UUID,
    payload: QuestStatusChangeRequest,
    admin_user: dict[str, Any] = Depends(require_admin),
) -> dict[str, Any]:
    try:
        result = repo.transition_quest_status(
            str(quest_id),
            payload.status,
            reason=payload.reason,
            actor_user_id=str(admin_user["id"]),
        )
    except QuestTransitionError as exc:
        status_code = 400 if exc.code == "reason_required" else 409
        raise HTTPException(status_code=status_code, detail=str(exc)) from exc
    if result is None:
        raise HTTPException(status_code=404, detail="Quest not found")
    return result
