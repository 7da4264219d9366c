from datetime import datetime, timedelta, timezone


def test_rooms(client, register):
    alice = register()

    created = client.post(
        "/api/community/rooms",
        json={"name": "python", "description": "All things Python", "topics": ["asyncio", " "]},
        headers=alice["headers"],
    )
    duplicate = client.post("/api/community/rooms", json={"name": "python"}, headers=alice["headers"])
    rooms = client.get("/api/community/rooms").json()

    assert created.status_code == 201
    assert created.json()["memberCount"] == 1
    assert created.json()["topics"] == ["asyncio"]
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Room already exists"
    assert [room["name"] for room in rooms] == ["python"]


def test_poll_votes_move_between_options(client, register):
    alice, bob = register("Alice"), register("Bob")
    expires = (datetime.now(timezone.utc) + timedelta(days=7)).isoformat()
    poll = client.post(
        "/api/community/polls",
        json={"question": "Tabs or spaces?", "options": ["Tabs", "Spaces"], "expiresAt": expires},
        headers=alice["headers"],
    ).json()
    url = f"/api/community/polls/{poll['_id']}/vote"

    client.post(url, json={"optionIndex": 0}, headers=bob["headers"])
    moved = client.post(url, json={"optionIndex": 1}, headers=bob["headers"]).json()

    assert moved["options"][0]["votes"] == []
    assert moved["options"][1]["votes"] == [bob["_id"]]
    assert [p["_id"] for p in client.get("/api/community/polls").json()] == [poll["_id"]]


def test_poll_validation_and_missing_poll(client, register):
    alice = register()

    invalid = client.post("/api/community/polls", json={"question": "Empty?", "options": []}, headers=alice["headers"])
    missing = client.post("/api/community/polls/unknown/vote", json={"optionIndex": 0}, headers=alice["headers"])

    assert invalid.status_code == 400
    assert invalid.json()["message"] == "Question and at least one option are required"
    assert missing.status_code == 404
