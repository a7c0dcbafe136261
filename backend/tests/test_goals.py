from __future__ import annotations

from tarot42.models.user_goal import UserGoal


def _create_goal(client, text: str = "Meditate daily") -> dict:
    res = client.post("/api/goals", json={"goalText": text})
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Goal created successfully"
    return body["goal"]


def test_create_goal_returns_camel_case_record(client, users):
    user_a, _ = users
    goal = _create_goal(client, "  Read one tarot book  ")

    assert goal["goalText"] == "Read one tarot book"
    assert goal["isAchieved"] is False
    assert goal["userId"] == user_a.id
    assert isinstance(goal["id"], int)
    assert goal["createdAt"]
    assert goal["updatedAt"]


def test_list_goals_in_creation_order(client):
    first = _create_goal(client, "First")
    second = _create_goal(client, "Second")

    res = client.get("/api/goals")
    assert res.status_code == 200
    assert [g["id"] for g in res.json()] == [first["id"], second["id"]]


def test_list_goals_empty(client):
    res = client.get("/api/goals")
    assert res.status_code == 200
    assert res.json() == []


def test_create_goal_rejects_missing_or_blank_text(client, db_session):
    for body in ({}, {"goalText": ""}, {"goalText": "   "}, {"goalText": None}):
        res = client.post("/api/goals", json=body)
        assert res.status_code == 400
        assert res.json()["message"] == "Goal text is required and cannot be empty."
        assert res.json()["code"] == "VALIDATION_ERROR"

    assert db_session.query(UserGoal).count() == 0


def test_create_goal_rejects_non_string_text(client):
    res = client.post("/api/goals", json={"goalText": 42})
    assert res.status_code == 400


def test_update_goal_text_and_status(client):
    goal = _create_goal(client)

    res = client.put(f"/api/goals/{goal['id']}", json={"goalText": "Meditate twice daily"})
    assert res.status_code == 200
    assert res.json()["message"] == "Goal updated successfully"
    assert res.json()["goal"]["goalText"] == "Meditate twice daily"
    assert res.json()["goal"]["isAchieved"] is False

    res = client.put(f"/api/goals/{goal['id']}", json={"isAchieved": True})
    assert res.status_code == 200
    updated = res.json()["goal"]
    assert updated["isAchieved"] is True
    assert updated["goalText"] == "Meditate twice daily"


def test_update_goal_validation(client):
    goal = _create_goal(client)
    url = f"/api/goals/{goal['id']}"

    res = client.put(url, json={})
    assert res.status_code == 400
    assert res.json()["message"] == "No update data provided."

    res = client.put(url, json={"goalText": "  "})
    assert res.status_code == 400
    assert res.json()["message"] == "Goal text cannot be empty."

    res = client.put(url, json={"isAchieved": None})
    assert res.status_code == 400
    assert res.json()["message"] == "isAchieved must be a boolean."

    res = client.put(url, json={"isAchieved": "yes"})
    assert res.status_code == 400


def test_update_unknown_goal_is_404(client):
    res = client.put("/api/goals/999999", json={"isAchieved": True})
    assert res.status_code == 404
    assert res.json()["message"] == "Goal not found or user not authorized to update."
    assert res.json()["code"] == "NOT_FOUND"


def test_delete_goal_returns_deleted_record(client, db_session):
    goal = _create_goal(client)

    res = client.delete(f"/api/goals/{goal['id']}")
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Goal deleted successfully"
    assert body["goal"]["id"] == goal["id"]
    assert body["goal"]["goalText"] == goal["goalText"]

    db_session.expire_all()
    assert db_session.query(UserGoal).filter(UserGoal.id == goal["id"]).first() is None

    # Second delete finds nothing.
    res = client.delete(f"/api/goals/{goal['id']}")
    assert res.status_code == 404
    assert res.json()["message"] == "Goal not found or user not authorized to delete."


def test_non_integer_goal_id_is_rejected(client):
    res = client.put("/api/goals/not-a-number", json={"isAchieved": True})
    assert res.status_code == 400


def test_out_of_range_goal_id_is_rejected(client, db_session):
    goal = _create_goal(client)

    for goal_id in ("99999999999999999999", "2147483648", "0", "-1"):
        res = client.put(f"/api/goals/{goal_id}", json={"isAchieved": True})
        assert res.status_code == 400
        assert res.json()["code"] == "VALIDATION_ERROR"

        res = client.delete(f"/api/goals/{goal_id}")
        assert res.status_code == 400
        assert res.json()["code"] == "VALIDATION_ERROR"

    db_session.expire_all()
    row = db_session.query(UserGoal).filter(UserGoal.id == goal["id"]).one()
    assert row.is_achieved is False


def test_delete_never_existing_goal_leaves_rows_untouched(client, db_session):
    _create_goal(client, "First")
    _create_goal(client, "Second")
    before = db_session.query(UserGoal).count()

    res = client.delete("/api/goals/424242")
    assert res.status_code == 404
    assert res.json()["message"] == "Goal not found or user not authorized to delete."

    db_session.expire_all()
    assert db_session.query(UserGoal).count() == before == 2
