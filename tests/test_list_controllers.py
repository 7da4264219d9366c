import json

import httpx
import pytest

from portal.client.cache import BOOKMARKS_CACHE_KEY, SessionCache
from portal.client.config import client_settings
from portal.client.lists import (
    BookmarksController,
    CommunityController,
    ModerationQueueController,
    ProjectDetailController,
    ProjectGalleryController,
)
from portal.client.models import User
from portal.client.session import AuthSession
from portal.client.storage import MemoryStorage


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _bookmark(post_id: str, likes=(), post_type="article", created="2024-05-01T10:00:00Z") -> dict:
    return {"_id": post_id, "title": f"Post {post_id}", "type": post_type, "likes": list(likes), "createdAt": created}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return SessionCache(MemoryStorage(), ttl_seconds=300, clock=clock)


@pytest.fixture
def bookmarks(session, ui, api_for, cache):
    return BookmarksController(session, api_for(session), ui, cache)


def test_cache_ttl(cache, clock):
    cache.write("k", [1, 2])

    clock.now += 299
    assert cache.read("k") == [1, 2]
    clock.now += 1
    assert cache.read("k") is None
    assert cache.read("missing") is None


def test_cache_ttl_defaults_to_client_setting(monkeypatch, clock):
    monkeypatch.setattr(client_settings, "BOOKMARK_CACHE_TTL_SECONDS", 60)
    cache = SessionCache(MemoryStorage(), clock=clock)
    cache.write("k", "v")

    clock.now += 59
    assert cache.read("k") == "v"
    clock.now += 1
    assert cache.read("k") is None


def test_corrupt_cache_entry_reads_as_none(cache):
    cache.storage.set_item("k", "{not json")
    assert cache.read("k") is None

    cache.storage.set_item("k", json.dumps({"data": [1]}))
    assert cache.read("k") is None


def test_bookmarks_paint_from_cache_then_refresh(fake_server, bookmarks, cache):
    cache.write(BOOKMARKS_CACHE_KEY, [_bookmark("old")])
    painted = {}

    def serve(request):
        painted["ids"] = [post.id for post in bookmarks.items]
        return httpx.Response(200, json={"bookmarks": [_bookmark("fresh")], "total": 1})

    fake_server.on("GET", "/users/bookmarks", handler=serve)

    bookmarks.open()

    assert painted["ids"] == ["old"]
    assert bookmarks.painted_from_cache
    assert [post.id for post in bookmarks.items] == ["fresh"]
    assert [item["_id"] for item in cache.read(BOOKMARKS_CACHE_KEY)] == ["fresh"]


def test_expired_cache_is_not_painted(fake_server, bookmarks, cache, clock):
    cache.write(BOOKMARKS_CACHE_KEY, [_bookmark("old")])
    clock.now += 301
    fake_server.on("GET", "/users/bookmarks", {"bookmarks": [], "total": 0})

    bookmarks.open()

    assert not bookmarks.painted_from_cache
    assert bookmarks.items == []


def test_bookmark_sorting(bookmarks):
    items = bookmarks.parse(
        [
            _bookmark("a", likes=["x"], post_type="question"),
            _bookmark("b", likes=["x", "y"], post_type="article"),
            _bookmark("c", likes=["z"], post_type="discussion"),
        ]
    )

    assert [p.id for p in bookmarks.sort(items, "recent")] == ["c", "b", "a"]
    liked = bookmarks.sort(items, "liked")
    assert [p.id for p in liked] == ["b", "a", "c"]
    assert all(len(x.likes) >= len(y.likes) for x, y in zip(liked, liked[1:]))
    assert [p.type for p in bookmarks.sort(items, "type")] == ["article", "discussion", "question"]


def test_unbookmark_removes_item_locally(fake_server, bookmarks):
    fake_server.on("GET", "/users/bookmarks", {"bookmarks": [_bookmark("a"), _bookmark("b")], "total": 2})
    fake_server.on("PUT", "/posts/a/bookmark", {"isBookmarked": False, "bookmarksCount": 0})
    bookmarks.fetch_all()

    bookmarks.toggle_bookmark("a")

    assert [post.id for post in bookmarks.items] == ["b"]
    assert len(fake_server.calls("GET")) == 1


def test_bookmark_like_merges_by_id(fake_server, bookmarks):
    fake_server.on("GET", "/users/bookmarks", {"bookmarks": [_bookmark("a"), _bookmark("b")], "total": 2})
    fake_server.on("PUT", "/posts/b/like", ["reader"])
    bookmarks.fetch_all()

    bookmarks.like("b")

    assert bookmarks.find("b").likes == ["reader"]
    assert bookmarks.find("a").likes == []


def test_bookmark_delete_asks_first(fake_server, bookmarks, ui):
    fake_server.on("GET", "/users/bookmarks", {"bookmarks": [_bookmark("a")], "total": 1})
    fake_server.on("DELETE", "/posts/a", {"message": "Post removed"})
    bookmarks.fetch_all()

    ui.confirm_answer = False
    bookmarks.delete("a")
    assert fake_server.calls("DELETE") == []

    ui.confirm_answer = True
    bookmarks.delete("a")
    assert bookmarks.items == []


def _room(room_id, name, members, topics=(), created="2024-05-01T10:00:00Z") -> dict:
    return {"_id": room_id, "name": name, "memberCount": members, "topics": list(topics), "createdAt": created}


def test_community_lists_rooms_and_polls(fake_server, session, ui, api_for):
    fake_server.on(
        "GET",
        "/community/rooms",
        [
            _room("r1", "python", 3, ["asyncio"], "2024-05-01T10:00:00Z"),
            _room("r2", "Data", 9, ["pandas"], "2024-05-03T10:00:00Z"),
        ],
    )
    fake_server.on("GET", "/community/polls", [{"_id": "poll1", "question": "?", "options": [{"text": "A", "votes": []}]}])
    community = CommunityController(session, api_for(session), ui)

    community.fetch_all()

    assert [room.id for room in community.sort(community.rooms, "members")] == ["r2", "r1"]
    assert [room.id for room in community.sort(community.rooms, "name")] == ["r2", "r1"]
    assert [room.id for room in community.sort(community.rooms, "recent")] == ["r2", "r1"]
    assert [room.id for room in community.filter_by_topic("AsyncIO")] == ["r1"]
    assert [widget.poll.id for widget in community.poll_widgets()] == ["poll1"]


def test_create_poll_requires_login(fake_server, anonymous, ui, api_for):
    community = CommunityController(anonymous, api_for(anonymous), ui)

    assert community.create_poll("Tabs?", "Tabs, Spaces") is False
    assert ui.alerts == ["Login required"]
    assert fake_server.requests == []


def test_create_poll_posts_trimmed_options_and_refreshes(fake_server, session, ui, api_for):
    fake_server.on("POST", "/community/polls", {"_id": "poll1"}, status=201)
    fake_server.on("GET", "/community/rooms", [])
    fake_server.on("GET", "/community/polls", [])
    community = CommunityController(session, api_for(session), ui)

    assert community.create_poll("Tabs?", "Tabs, Spaces") is True

    sent = json.loads(fake_server.calls("POST")[0].content)
    assert sent["options"] == ["Tabs", "Spaces"]
    assert "expiresAt" in sent
    assert len(fake_server.calls("GET")) == 2


def test_create_room_failure_alerts(fake_server, session, ui, api_for):
    fake_server.on("POST", "/community/rooms", {"message": "Room already exists"}, status=400)
    community = CommunityController(session, api_for(session), ui)

    assert community.create_room("python", topics="asyncio") is False
    assert ui.alerts == ["Failed to create room"]


def _project(project_id, title, tags, likes=(), views=0, created="2024-05-01T10:00:00Z") -> dict:
    return {"_id": project_id, "title": title, "tags": list(tags), "likes": list(likes), "views": views, "createdAt": created}


def test_project_gallery(fake_server, session, ui, api_for):
    fake_server.on(
        "GET",
        "/projects",
        [
            _project("p1", "Portal CLI", ["Tool"], likes=["a"], views=5, created="2024-05-02T10:00:00Z"),
            _project("p2", "Chat bot", ["AI", "Python"], likes=["a", "b"], created="2024-05-01T10:00:00Z"),
        ],
    )
    fake_server.on("PUT", "/projects/p1/like", ["a", "reader"])
    gallery = ProjectGalleryController(session, api_for(session), ui, tag="Tool", order="popular")

    gallery.fetch_all()
    gallery.like("p1")

    assert dict(fake_server.calls("GET")[0].url.params) == {"tag": "Tool", "sort": "popular"}
    assert [p.id for p in gallery.sort(gallery.items, "popular")] == ["p1", "p2"]
    assert [p.id for p in gallery.sort(gallery.items, "oldest")] == ["p2", "p1"]
    assert [p.id for p in gallery.search("bot")] == ["p2"]
    assert [p.id for p in gallery.search(tag_filter="python")] == ["p2"]
    assert [p.id for p in gallery.search(tag_filter="All")] == ["p1", "p2"]


def test_project_detail_comment(fake_server, session, ui, api_for):
    fake_server.on("GET", "/projects/p1", _project("p1", "Portal CLI", ["Tool"]))
    fake_server.on("POST", "/projects/p1/comments", [{"_id": "c1", "text": "Neat"}])
    detail = ProjectDetailController("p1", session, api_for(session), ui)
    detail.load()

    assert detail.comment("Neat") is True

    assert [c.text for c in detail.project.comments] == ["Neat"]
    assert detail.comment_text == ""


@pytest.fixture
def moderator():
    session = AuthSession(MemoryStorage())
    session.login("token-mod", User.model_validate({"_id": "mod", "name": "Mod", "role": "moderator"}))
    return session


def _queued(post_id: str, flags=()) -> dict:
    return {"_id": post_id, "title": f"Post {post_id}", "moderationStatus": "pending", "flags": list(flags)}


def test_moderation_queue_skips_non_moderators(fake_server, session, ui, api_for):
    queue = ModerationQueueController(session, api_for(session), ui)

    assert queue.open() == []
    assert queue.loading is False
    assert fake_server.requests == []


def test_moderation_queue_resolves_and_drops_post(fake_server, moderator, ui, api_for):
    fake_server.on("GET", "/moderation/posts", [_queued("a", [{"reason": "spam"}]), _queued("b")])
    fake_server.on("PUT", "/moderation/posts/a", {"_id": "a", "moderationStatus": "approved"})
    queue = ModerationQueueController(moderator, api_for(moderator), ui)
    queue.open()
    queue.notes["a"] = "Looks fine"

    assert [queue.reasons(post) for post in queue.items] == [["spam"], ["auto-flagged"]]
    assert queue.resolve("a", "approved") is True
    assert json.loads(fake_server.calls("PUT", "/moderation/posts/a")[0].content) == {"status": "approved", "note": "Looks fine"}
    assert [post.id for post in queue.items] == ["b"]
    assert len(fake_server.calls("GET", "/moderation/posts")) == 1


def test_moderation_failures_are_surfaced(fake_server, moderator, ui, api_for):
    fake_server.on("GET", "/moderation/posts", {"message": "Not authorized"}, status=403)
    fake_server.on("PUT", "/moderation/posts/a", {"message": "Invalid status"}, status=400)
    queue = ModerationQueueController(moderator, api_for(moderator), ui)

    queue.open()
    assert queue.error == "Not authorized"

    queue.items = queue.parse([_queued("a")])
    assert queue.resolve("a", "maybe") is False
    assert ui.alerts == ["Invalid status"]
    assert [post.id for post in queue.items] == ["a"]
