def _project(**fields) -> dict:
    body = {
        "title": "Portal CLI",
        "description": "Terminal client for the portal",
        "coverImage": "/uploads/cover.png",
        "tags": ["Tool", "Python"],
    }
    body.update(fields)
    return body


def test_create_requires_cover_image(client, register):
    alice = register()

    response = client.post("/api/projects", json=_project(coverImage=None), headers=alice["headers"])

    assert response.status_code == 400
    assert response.json()["message"] == "Title, description, and cover image are required"


def test_gallery_filters_by_tag(client, register):
    alice = register()
    client.post("/api/projects", json=_project(), headers=alice["headers"])
    client.post("/api/projects", json=_project(title="Chat bot", tags=["AI"]), headers=alice["headers"])

    ai = client.get("/api/projects", params={"tag": "AI"}).json()
    everything = client.get("/api/projects").json()

    assert [p["title"] for p in ai] == ["Chat bot"]
    assert len(everything) == 2
    assert "comments" not in everything[0]


def test_detail_like_and_comments(client, register):
    alice, bob = register("Alice"), register("Bob")
    project = client.post("/api/projects", json=_project(), headers=alice["headers"]).json()
    url = f"/api/projects/{project['_id']}"

    likes = client.put(f"{url}/like", headers=bob["headers"]).json()
    comments = client.post(f"{url}/comments", json={"text": "Neat"}, headers=bob["headers"]).json()
    detail = client.get(url).json()

    assert likes == [bob["_id"]]
    assert [c["text"] for c in comments] == ["Neat"]
    assert detail["views"] == 1
    assert detail["comments"][0]["user"]["_id"] == bob["_id"]
    assert client.get("/api/projects/missing").status_code == 404
