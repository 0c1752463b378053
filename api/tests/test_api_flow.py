import uuid
from datetime import date, datetime, timezone

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

import app.main as m
from app import repo
from app.auth import security
from app.routes import quests as quests_routes

SECRET = "test-secret-for-openclique-jwt-signing"
USER_ID = str(uuid.uuid4())
ADMIN_ID = str(uuid.uuid4())
QUEST_KAYAK = uuid.uuid4()
QUEST_BAR = uuid.uuid4()
QUEST_POTTERY = uuid.uuid4()


class _Result:
    def __init__(self, rows):
        self._rows = rows

    def mappings(self):
        return self

    def all(self):
        return self._rows

    def first(self):
        return self._rows[0] if self._rows else None


class _FakeSession:
    def __init__(self, store):
        self.store = store

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, statement, params=None):
        sql = str(statement)
        params = params or {}
        if "FROM quests q" in sql:
            return _Result(self.store["quests"])
        if "FROM quest_constraints" in sql:
            return _Result(self.store["constraints"])
        if "FROM quest_personality_affinity" in sql:
            return _Result(self.store["affinities"])
        if "FOR UPDATE" in sql:
            row = self.store["status"].get(params["id"])
            return _Result([{"id": params["id"], "status": row}] if row else [])
        if sql.startswith("UPDATE quests"):
            self.store["status"][params["id"]] = params["status"]
            self.store["updates"].append(params)
            return _Result([])
        if "INSERT INTO product_event" in sql:
            self.store["events"].append(params)
            return _Result([])
        return _Result([])

    def commit(self):
        self.store["commits"] += 1


@pytest.fixture
def store():
    return {
        "quests": [
            {"id": QUEST_BAR, "title": "Rooftop bar night", "status": "open", "review_status": "approved", "start_datetime": datetime(2026, 3, 1, tzinfo=timezone.utc)},
            {"id": QUEST_POTTERY, "title": "Pottery wheel", "status": "open", "review_status": "approved", "start_datetime": datetime(2026, 3, 2, tzinfo=timezone.utc)},
            {"id": QUEST_KAYAK, "title": "Sunset kayak", "status": "open", "review_status": "approved", "start_datetime": None},
        ],
        "constraints": [
            {"quest_id": QUEST_BAR, "alcohol": "primary", "age_requirement": "21_plus"},
        ],
        "affinities": [
            {"quest_id": QUEST_KAYAK, "trait_key": "adventurous", "trait_weight": 100, "explanation": "For people who want to get outside"},
            {"quest_id": QUEST_POTTERY, "trait_key": "creative", "trait_weight": 100, "explanation": None},
        ],
        "status": {str(QUEST_KAYAK): "open"},
        "updates": [],
        "events": [],
        "commits": 0,
    }


@pytest.fixture
def client(monkeypatch, store):
    monkeypatch.setattr(m, "wait_for_db", lambda *args, **kwargs: None)
    monkeypatch.setattr(security, "JWT_SECRET", SECRET)
    monkeypatch.setattr(quests_routes, "SessionLocal", lambda: _FakeSession(store))
    monkeypatch.setattr(repo, "SessionLocal", lambda: _FakeSession(store))
    monkeypatch.setattr(repo, "get_user_roles", lambda user_id: ["admin"] if user_id == ADMIN_ID else [])
    monkeypatch.setattr(
        repo,
        "get_profile",
        lambda user_id: {
            "id": user_id,
            "display_name": "Sam",
            "birthdate": date(1995, 4, 2),
            "preferences": {
                "interests": {"not_my_thing": ["drinking_focused"], "quest_types": ["outdoors", "arts_creative"]},
            },
        } if user_id == USER_ID else None,
    )
    return TestClient(m.app)


def _auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {security.create_access_token(user_id)}"}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/_scaffold/quests/health").json() == {"status": "ok", "module": "quests"}


def test_feed_requires_auth(client):
    assert client.get("/quests/feed").status_code == 401


def test_feed_filters_and_ranks_from_profile_preferences(client, store):
    resp = client.get("/quests/feed", headers=_auth(USER_ID))
    assert resp.status_code == 200
    body = resp.json()

    assert [q["id"] for q in body["quests"]] == [str(QUEST_POTTERY), str(QUEST_KAYAK)]
    assert [q["match_score"] for q in body["quests"]] == [80, 70]
    assert body["quests"][0]["match_reason"] == "Great for creative types"
    assert body["count"] == 2
    assert body["filters"]["alcohol_preference"] == "no_alcohol"
    assert store["events"][-1]["event_name"] == "quest_feed_viewed"
    assert store["commits"] == 1


def test_match_with_explicit_filters_and_traits(client):
    resp = client.post(
        "/quests/match",
        headers=_auth(USER_ID),
        json={"filters": {}, "traits": {"adventurous": 90}},
    )
    assert resp.status_code == 200
    quests = resp.json()["quests"]
    assert [q["id"] for q in quests] == [str(QUEST_KAYAK), str(QUEST_BAR), str(QUEST_POTTERY)]
    assert quests[0]["match_score"] == 90
    assert quests[0]["match_reason"] == "For people who want to get outside"


def test_match_rejects_invalid_filter_values(client):
    resp = client.post("/quests/match", headers=_auth(USER_ID), json={"filters": {"physical_preference": "extreme"}})
    assert resp.status_code == 422


@pytest.mark.parametrize("traits", [{"adventurous": 150}, {"adventurous": -1}])
def test_match_rejects_trait_weights_outside_range(client, traits):
    resp = client.post("/quests/match", headers=_auth(USER_ID), json={"filters": {}, "traits": traits})
    assert resp.status_code == 422


def test_me_reports_auth_state(client):
    ready = client.get("/me", headers=_auth(USER_ID)).json()
    assert ready["auth_state"] == "authenticated_ready"
    assert ready["matching_traits"] == {"creative": 80, "adventurous": 70}

    pending = client.get("/me", headers=_auth(ADMIN_ID)).json()
    assert pending["auth_state"] == "authenticated_profile_pending"
    assert pending["roles"] == ["admin"]


def test_admin_status_change_requires_admin(client):
    resp = client.post(f"/admin/quests/{QUEST_KAYAK}/status", headers=_auth(USER_ID), json={"status": "closed"})
    assert resp.status_code == 403


def test_admin_status_change_flow(client, store):
    quest_id = str(QUEST_KAYAK)

    missing_reason = client.post(f"/admin/quests/{quest_id}/status", headers=_auth(ADMIN_ID), json={"status": "cancelled"})
    assert missing_reason.status_code == 400

    not_allowed = client.post(f"/admin/quests/{quest_id}/status", headers=_auth(ADMIN_ID), json={"status": "completed"})
    assert not_allowed.status_code == 409

    paused = client.post(
        f"/admin/quests/{quest_id}/status",
        headers=_auth(ADMIN_ID),
        json={"status": "paused", "reason": "weather"},
    )
    assert paused.status_code == 200
    assert paused.json() == {"id": quest_id, "status": "paused", "previous_status": "open"}
    assert store["updates"][-1]["paused_reason"] == "weather"
    assert store["events"][-1]["event_name"] == "quest_status_changed"

    unknown = client.post(f"/admin/quests/{uuid.uuid4()}/status", headers=_auth(ADMIN_ID), json={"status": "open"})
    assert unknown.status_code == 404


def test_admin_routes_reject_non_uuid_quest_id(client, monkeypatch):
    def _unexpected(*args, **kwargs):
        raise AssertionError("repo should not be queried with a malformed quest id")

    monkeypatch.setattr(repo, "get_quest_status", _unexpected)
    monkeypatch.setattr(repo, "transition_quest_status", _unexpected)

    listing = client.get("/admin/quests/not-a-uuid/transitions", headers=_auth(ADMIN_ID))
    assert listing.status_code == 422

    change = client.post("/admin/quests/not-a-uuid/status", headers=_auth(ADMIN_ID), json={"status": "closed"})
    assert change.status_code == 422


def test_admin_transitions_listing(client, monkeypatch):
    monkeypatch.setattr(repo, "get_quest_status", lambda quest_id: {"id": quest_id, "status": "closed"})
    resp = client.get(f"/admin/quests/{QUEST_KAYAK}/transitions", headers=_auth(ADMIN_ID))
    assert resp.json()["allowed"] == ["completed", "cancelled", "open"]
