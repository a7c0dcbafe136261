from __future__ import annotations

from tarot42.models.user_goal import UserGoal


def _create_goal(client, text: str) -> dict:
    res = client.post("/api/goals", json={"goalText": text})
    assert res.status_code == 201
    return res.json()["goal"]


def test_user_cannot_modify_or_delete_other_users_goal(users, client_for, db_session):
    user_a, user_b = users

    with client_for(user_a) as c_a:
        goal = _create_goal(c_a, "Private intention")

    with client_for(user_b) as c_b:
        res = c_b.put(f"/api/goals/{goal['id']}", json={"goalText": "hijacked", "isAchieved": True})
        assert res.status_code == 404
        assert res.json()["message"] == "Goal not found or user not authorized to update."

        res = c_b.delete(f"/api/goals/{goal['id']}")
        assert res.status_code == 404

        # Listing is scoped too.
        assert c_b.get("/api/goals").json() == []

    db_session.expire_all()
    row = db_session.query(UserGoal).filter(UserGoal.id == goal["id"]).one()
    assert row.user_id == user_a.id
    assert row.goal_text == "Private intention"
    assert row.is_achieved is False


def test_goal_lists_are_per_user(users, client_for):
    user_a, user_b = users

    with client_for(user_a) as c_a:
        _create_goal(c_a, "A1")
        _create_goal(c_a, "A2")

    with client_for(user_b) as c_b:
        _create_goal(c_b, "B1")
        goals_b = c_b.get("/api/goals").json()

    with client_for(user_a) as c_a:
        goals_a = c_a.get("/api/goals").json()

    assert [g["goalText"] for g in goals_a] == ["A1", "A2"]
    assert [g["goalText"] for g in goals_b] == ["B1"]
    assert {g["userId"] for g in goals_a} == {user_a.id}


def test_profile_reads_and_writes_are_scoped_to_the_session_user(users, client_for, db_session):
    user_a, user_b = users

    with client_for(user_b) as c_b:
        res = c_b.put("/api/profile", json={"zodiacSign": "Leo"})
        assert res.status_code == 200
        assert res.json()["user"]["id"] == user_b.id

    with client_for(user_a) as c_a:
        profile = c_a.get("/api/profile").json()
        assert profile["id"] == user_a.id
        assert profile["zodiacSign"] is None

    db_session.expire_all()
    db_session.refresh(user_a)
    db_session.refresh(user_b)
    assert user_a.zodiac_sign is None
    assert user_b.zodiac_sign == "Leo"


def test_card_history_is_per_user(users, client_for):
    user_a, user_b = users

    with client_for(user_a) as c_a:
        assert c_a.post("/api/cards/history", json={"cardName": "The Tower"}).status_code == 201

    with client_for(user_b) as c_b:
        assert c_b.get("/api/cards/history").json() == []
