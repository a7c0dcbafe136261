from __future__ import annotations


def test_record_and_list_drawn_cards(client, users):
    user_a, _ = users

    res = client.post(
        "/api/cards/history",
        json={"cardName": "The Star", "cardUpright": False, "readingContext": "  morning pull  "},
    )
    assert res.status_code == 201
    card = res.json()
    assert card["cardName"] == "The Star"
    assert card["cardUpright"] is False
    assert card["readingContext"] == "morning pull"
    assert card["userId"] == user_a.id
    assert card["drawnAt"]

    client.post("/api/cards/history", json={"cardName": "The Moon"})

    res = client.get("/api/cards/history")
    assert res.status_code == 200
    names = [c["cardName"] for c in res.json()]
    # Most recent first.
    assert names == ["The Moon", "The Star"]
    assert res.json()[0]["cardUpright"] is True
    assert res.json()[0]["readingContext"] is None


def test_card_history_limit(client):
    for name in ("The Fool", "The Magician", "The High Priestess"):
        assert client.post("/api/cards/history", json={"cardName": name}).status_code == 201

    res = client.get("/api/cards/history", params={"limit": 2})
    assert res.status_code == 200
    assert [c["cardName"] for c in res.json()] == ["The High Priestess", "The Magician"]


def test_card_history_limit_bounds(client):
    assert client.get("/api/cards/history", params={"limit": 0}).status_code == 400
    assert client.get("/api/cards/history", params={"limit": 101}).status_code == 400


def test_record_card_requires_name(client):
    for body in ({}, {"cardName": ""}, {"cardName": "   "}):
        res = client.post("/api/cards/history", json=body)
        assert res.status_code == 400
        assert res.json()["message"] == "Card name is required and cannot be empty."


def test_record_card_rejects_non_boolean_orientation(client):
    res = client.post("/api/cards/history", json={"cardName": "Death", "cardUpright": "upright"})
    assert res.status_code == 400
