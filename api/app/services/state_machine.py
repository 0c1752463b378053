from datetime import datetime
from typing import Any

ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "draft": ("open", "paused"),
    "open": ("closed", "paused", "cancelled", "revoked"),
    "closed": ("completed", "cancelled", "open"),
    "completed": (),
    "cancelled": (),
    "paused": ("open", "cancelled", "revoked"),
    "revoked": (),
}

REQUIRE_REASON = {"cancelled", "revoked"}


class QuestTransitionError(Exception):
    def __init__(self, message: str, *, code: str):
        self.code = code
        super().__init__(message)


def allowed_transitions(current: str) -> list[str]:
    return list(ALLOWED_TRANSITIONS.get(current, ()))


def is_transition_allowed(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, ())


def plan_status_transition(current: str, target: str, reason: str | None, now: datetime) -> dict[str, Any]:
    if not is_transition_allowed(current, target):
        raise QuestTransitionError(f"Cannot transition from {current} to {target}", code="transition_not_allowed")

    reason = (reason or "").strip() or None
    if target in REQUIRE_REASON and not reason:
        raise QuestTransitionError(f"Reason is required when setting status to {target}", code="reason_required")

    update: dict[str, Any] = {"status": target, "previous_status": current}
    if target == "paused":
        update["paused_at"] = now
        update["paused_reason"] = reason
    elif target == "revoked":
        update["revoked_at"] = now
        update["revoked_reason"] = reason

    if current == "paused" and target == "open":
        update["paused_at"] = None
        update["paused_reason"] = None
    return update
