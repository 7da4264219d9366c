import io

from PIL import Image


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), "red").save(buffer, format="PNG")
    return buffer.getvalue()


def test_profile_is_public_and_hides_password(client, register, make_post):
    alice = register("Alice")
    make_post(alice["headers"])

    body = client.get(f"/api/users/{alice['_id']}").json()

    assert body["user"]["name"] == "Alice"
    assert "password" not in body["user"]
    assert body["user"]["stats"]["joinedDaysAgo"] == 0
    assert len(body["recentPosts"]) == 1
    assert client.get("/api/users/nobody").status_code == 404


def test_update_profile_ignores_credentials(client, register):
    alice = register("Alice", email="alice@example.com")

    updated = client.put(
        "/api/users/profile",
        json={"bio": "Pythonista", "jobTitle": "Engineer", "email": "evil@example.com", "password": "x"},
        headers=alice["headers"],
    ).json()["user"]

    assert updated["bio"] == "Pythonista"
    assert updated["jobTitle"] == "Engineer"
    assert updated["email"] == "alice@example.com"
    login = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert login.status_code == 200


def test_follow_toggle(client, register):
    alice, bob = register("Alice"), register("Bob")

    followed = client.put(f"/api/users/{alice['_id']}/follow", headers=bob["headers"]).json()
    profile = client.get(f"/api/users/{alice['_id']}").json()
    unfollowed = client.put(f"/api/users/{alice['_id']}/follow", headers=bob["headers"]).json()
    self_follow = client.put(f"/api/users/{bob['_id']}/follow", headers=bob["headers"])

    assert followed == {"isFollowing": True, "followersCount": 1}
    assert [f["_id"] for f in profile["user"]["followers"]] == [bob["_id"]]
    assert unfollowed == {"isFollowing": False, "followersCount": 0}
    assert self_follow.status_code == 400


def test_avatar_upload(client, register):
    alice = register()

    response = client.post(
        "/api/users/avatar",
        files={"avatar": ("me.png", _png_bytes(), "image/png")},
        headers=alice["headers"],
    )
    not_image = client.post(
        "/api/users/avatar",
        files={"avatar": ("notes.txt", b"hello", "text/plain")},
        headers=alice["headers"],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["avatarUrl"].endswith(".png")
    assert body["user"]["avatar"] == body["avatarUrl"]
    assert not_image.status_code == 400


def test_collections_lifecycle(client, register, make_post):
    alice = register()
    post = make_post(alice["headers"])

    blank = client.post("/api/users/collections", json={"name": " "}, headers=alice["headers"])
    created = client.post("/api/users/collections", json={"name": "Reading list"}, headers=alice["headers"]).json()
    collection_id = created["collections"][0]["_id"]
    base = f"/api/users/collections/{collection_id}"

    client.post(f"{base}/posts", json={"postId": post["_id"]}, headers=alice["headers"])
    twice = client.post(f"{base}/posts", json={"postId": post["_id"]}, headers=alice["headers"]).json()
    detail = client.get(base, headers=alice["headers"]).json()["collection"]
    renamed = client.put(base, json={"name": "Later", "isPublic": True}, headers=alice["headers"]).json()["collection"]
    removed = client.delete(f"{base}/posts/{post['_id']}", headers=alice["headers"]).json()["collection"]
    remaining = client.delete(base, headers=alice["headers"]).json()

    assert blank.status_code == 400
    assert twice["collection"]["posts"] == [post["_id"]]
    assert [p["_id"] for p in detail["postDetails"]] == [post["_id"]]
    assert renamed["name"] == "Later" and renamed["isPublic"] is True
    assert removed["posts"] == []
    assert remaining == {"collections": []}


def test_collections_are_private_to_owner(client, register):
    alice, bob = register("Alice"), register("Bob")
    created = client.post("/api/users/collections", json={"name": "Mine"}, headers=alice["headers"]).json()
    collection_id = created["collections"][0]["_id"]

    assert client.get(f"/api/users/collections/{collection_id}", headers=bob["headers"]).status_code == 404
    assert client.get("/api/users/collections", headers=bob["headers"]).json() == {"collections": []}
