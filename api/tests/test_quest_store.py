import uuid

from app.database import Base
from app.services.quest_store import fetch_affinities_by_quest, fetch_constraints_by_quest


class _Result:
    def __init__(self, rows):
        self._rows = rows

    def mappings(self):
        return self

    def all(self):
        return self._rows


class _FakeDB:
    def __init__(self, rows=None):
        self.rows = rows or []
        self.calls = []

    def execute(self, statement, params=None):
        self.calls.append((str(statement), params))
        return _Result(self.rows)


def test_accessors_skip_query_for_empty_ids():
    db = _FakeDB()
    assert fetch_constraints_by_quest(db, []) == {}
    assert fetch_affinities_by_quest(db, []) == {}
    assert db.calls == []


def test_constraints_keyed_by_stringified_quest_id():
    quest_id = uuid.uuid4()
    db = _FakeDB([{"quest_id": quest_id, "alcohol": "optional", "age_requirement": "18_plus"}])
    out = fetch_constraints_by_quest(db, [str(quest_id)])
    assert list(out) == [str(quest_id)]
    assert out[str(quest_id)].alcohol == "optional"
    assert out[str(quest_id)].physical_intensity == "medium"
    assert db.calls[0][1] == {"quest_ids": [str(quest_id)]}


def test_affinities_grouped_per_quest_in_row_order():
    a, b = uuid.uuid4(), uuid.uuid4()
    db = _FakeDB(
        [
            {"quest_id": a, "trait_key": "creative", "trait_weight": 80, "explanation": None},
            {"quest_id": b, "trait_key": "foodie", "trait_weight": 60, "explanation": "Snacks"},
            {"quest_id": a, "trait_key": "reflective", "trait_weight": 40, "explanation": None},
        ]
    )
    out = fetch_affinities_by_quest(db, [str(a), str(b)])
    assert [x.trait_key for x in out[str(a)]] == ["creative", "reflective"]
    assert out[str(b)][0].explanation == "Snacks"


def test_schema_declares_matching_tables():
    import app.models  # noqa: F401

    tables = Base.metadata.tables
    for name in ("quests", "quest_constraints", "quest_personality_affinity", "profiles", "user_roles", "product_event"):
        assert name in tables
    constraint_names = {c.name for c in tables["quest_personality_affinity"].constraints}
    assert "uq_quest_affinity_trait" in constraint_names
    assert tables["quest_constraints"].c.quest_id.unique is True
