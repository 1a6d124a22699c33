"""
Integration tests for the analytics endpoints.

Every test seeds rows under its own educator id and passes it as
`educator_id`, so results only ever contain that test's data.
"""
import uuid

import pytest

from factories import add_behavior_log, add_child, add_classroom, add_classroom_log


@pytest.fixture()
def educator():
    return f"edu-{uuid.uuid4().hex[:8]}"


def _get(client, path, educator):
    return client.get(path, params={"educator_id": educator})


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# Children
# ---------------------------------------------------------------------------

class TestChildEndpoints:
    def test_children_list_omits_children_without_logs(self, client, db, educator):
        room = add_classroom(db, educator)
        busy = add_child(db, room.id, name="Busy")
        add_child(db, room.id, name="Quiet")
        for rating, strategy in [(8, "A"), (6, "A"), (7, "B")]:
            add_behavior_log(db, educator, child_id=busy.id,
                             confidence_rating=rating, selected_strategy=strategy)

        resp = _get(client, "/analytics/children", educator)
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 1
        item = body["items"][0]
        assert item["child_name"] == "Busy"
        assert item["total_logs"] == 3
        assert item["most_frequent_context"] == "transition"
        assert item["effective_strategies"] == ["A", "B"]
        assert item["severity_distribution"] == {"low": 3, "medium": 0, "high": 0}

    def test_single_child(self, client, db, educator):
        room = add_classroom(db, educator)
        kid = add_child(db, room.id)
        add_behavior_log(db, educator, child_id=kid.id, context="Circle Time")
        resp = _get(client, f"/analytics/child/{kid.id}", educator)
        assert resp.status_code == 200
        assert resp.json()["child_insight"]["most_frequent_context"] == "circle_time"

    def test_single_child_without_logs_is_null(self, client, db, educator):
        room = add_classroom(db, educator)
        kid = add_child(db, room.id)
        resp = _get(client, f"/analytics/child/{kid.id}", educator)
        assert resp.status_code == 200
        assert resp.json()["child_insight"] is None

    def test_unknown_child_404(self, client, educator):
        resp = _get(client, "/analytics/child/does-not-exist", educator)
        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == "CHILD_NOT_FOUND"
        assert body["details"]["child_id"] == "does-not-exist"


# ---------------------------------------------------------------------------
# Classrooms
# ---------------------------------------------------------------------------

class TestClassroomEndpoints:
    def test_climate_score(self, client, db, educator):
        room = add_classroom(db, educator, name="Sunflowers")
        for severity in ["high"] * 2 + ["medium"] * 3 + ["low"] * 5:
            add_classroom_log(db, educator, classroom_id=room.id, severity=severity)

        resp = _get(client, f"/analytics/classroom/{room.id}", educator)
        assert resp.status_code == 200
        insight = resp.json()["classroom_insight"]
        assert insight["classroom_name"] == "Sunflowers"
        assert insight["climate_score"] == 7.9
        assert insight["transition_challenges"] == 100
        assert insight["top_stressors"] == ["transition"]

    def test_list_skips_empty_classrooms(self, client, db, educator):
        busy = add_classroom(db, educator)
        add_classroom(db, educator)
        add_classroom_log(db, educator, classroom_id=busy.id)
        body = _get(client, "/analytics/classrooms", educator).json()
        assert body["total"] == 1
        assert body["items"][0]["classroom_id"] == busy.id

    def test_behavior_logs_attributed_through_child(self, client, db, educator):
        room = add_classroom(db, educator)
        kid = add_child(db, room.id)
        add_behavior_log(db, educator, child_id=kid.id, severity="high")
        insight = _get(client, f"/analytics/classroom/{room.id}", educator).json()["classroom_insight"]
        assert insight["total_logs"] == 1
        assert insight["severity_mix"]["high"] == 1

    def test_empty_classroom_is_null(self, client, db, educator):
        room = add_classroom(db, educator)
        resp = _get(client, f"/analytics/classroom/{room.id}", educator)
        assert resp.status_code == 200
        assert resp.json()["classroom_insight"] is None

    def test_unknown_classroom_404(self, client, educator):
        resp = _get(client, "/analytics/classroom/nope", educator)
        assert resp.status_code == 404
        assert resp.json()["code"] == "CLASSROOM_NOT_FOUND"


# ---------------------------------------------------------------------------
# Unified / organization
# ---------------------------------------------------------------------------

class TestUnifiedEndpoint:
    def test_shared_pattern_emitted(self, client, db, educator):
        room = add_classroom(db, educator)
        kids = [add_child(db, room.id) for _ in range(2)]
        for kid in kids:
            add_behavior_log(db, educator, child_id=kid.id, context="transition")
        add_behavior_log(db, educator, child_id=kids[0].id, context="meal_time")
        add_classroom_log(db, educator, classroom_id=room.id, context="transition", severity="high")
        add_classroom_log(db, educator, classroom_id=room.id, context="meal_time", severity="low")

        body = _get(client, "/analytics/unified", educator).json()
        assert body["total"] == 1
        item = body["items"][0]
        assert item["type"] == "nested_pattern"
        assert item["pattern"] == "transition"
        assert item["child_level"] == {"affected_children": 2, "frequency": 2}
        assert item["classroom_level"]["severity"] == "high"
        assert item["classroom_level"]["affected_classrooms"] == 1
        assert len(item["recommendations"]) >= 1

    def test_empty_snapshot(self, client, educator):
        body = _get(client, "/analytics/unified", educator).json()
        assert body == {"total": 0, "items": []}


class TestOrganizationEndpoint:
    def test_rollup(self, client, db, educator):
        room = add_classroom(db, educator, grade_band="Toddlers")
        kid = add_child(db, room.id, grade_band="Toddlers")
        add_behavior_log(db, educator, child_id=kid.id, severity="high",
                         stressors=["Loud noises"])
        add_classroom_log(db, educator, classroom_id=room.id, severity="low",
                          stressors=["Staff turnover"])

        body = _get(client, "/analytics/organization", educator).json()
        assert body["total_educators"] == 1
        assert body["total_children"] == 1
        assert body["total_behavior_logs"] == 1
        assert body["total_classroom_logs"] == 1
        assert body["high_severity_transitions"] == 50
        assert body["most_frequent_child_stressor"] == "Loud noises"
        assert body["classroom_stressor_prevalence"] == [
            {"stressor": "Staff turnover", "percentage": 100},
        ]
        assert {"grade": "Toddlers", "severity": "high", "percentage": 100} in body["severity_trends"]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def test_overlong_educator_id_is_validation_error(client):
    resp = client.get("/analytics/children", params={"educator_id": "x" * 65})
    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]["errors"][0]["field"] == "query.educator_id"
