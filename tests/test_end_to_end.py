import io

import pytest
from PIL import Image

from portal.client.api import ApiClient
from portal.client.cache import SessionCache
from portal.client.detail import PostDetailController
from portal.client.interface import UserInterface
from portal.client.lists import BookmarksController, CommunityController, ModerationQueueController
from portal.client.profile import ProfileEditor
from portal.client.session import AuthService, AuthSession
from portal.client.storage import MemoryStorage


@pytest.fixture
def connect(client):
    """Sign a new client session up against the in-process app."""
    def _connect(name: str):
        session = AuthSession(MemoryStorage())
        api = ApiClient("http://testserver/api", token_provider=session.get_token, http=client)
        AuthService(api, session).register(name, f"{name.lower()}@example.com", "secret123")
        return session, api

    return _connect


def test_question_flow(connect, client):
    asker, asker_api = connect("Asker")
    helper, helper_api = connect("Helper")
    created = asker_api.post(
        "/posts", json={"title": "How do I cancel a task?", "content": "Details", "category": "Python", "type": "question"}
    )

    helper_view = PostDetailController(created["_id"], helper, helper_api, UserInterface())
    helper_view.load()
    assert helper_view.submit_response("Call task.cancel()") is True
    helper_view.like()
    helper_view.bookmark()

    asker_view = PostDetailController(created["_id"], asker, asker_api, UserInterface())
    asker_view.load()
    answer_id = asker_view.post.answers[0].id
    asker_view.accept_answer(answer_id)

    assert helper_view.is_liked and helper_view.is_saved
    assert asker_view.post.accepted_answer == answer_id
    assert asker_view.total_comments == 1

    bookmarks = BookmarksController(helper, helper_api, UserInterface(), SessionCache(MemoryStorage()))
    assert [post.id for post in bookmarks.open()] == [created["_id"]]
    bookmarks.toggle_bookmark(created["_id"])
    assert bookmarks.items == []


def test_summary_without_ai_key_becomes_error(connect):
    session, api = connect("Writer")
    created = api.post("/posts", json={"title": "Notes", "content": "Body", "category": "Python"})
    ui = UserInterface()
    view = PostDetailController(created["_id"], session, api, ui)
    view.load()

    view.generate_summary()

    assert view.post.summary.status == "error"
    assert ui.alerts == ["AI summaries are not configured"]


def test_community_poll_vote(connect):
    session, api = connect("Voter")
    community = CommunityController(session, api, UserInterface())

    assert community.create_poll("Tabs or spaces?", "Tabs, Spaces") is True
    widget = community.poll_widgets()[0]
    assert widget.vote(1) is True

    refreshed = community.poll_widgets()[0]
    assert refreshed.user_vote_index == 1
    assert refreshed.percentages() == [0, 100]


def test_profile_edit_refreshes_session(connect):
    session, api = connect("Painter")
    canvas = io.BytesIO()
    Image.new("RGB", (8, 8), "teal").save(canvas, format="PNG")
    editor = ProfileEditor(session, api, UserInterface())
    editor.form.update({"bio": "Draws things", "skills": "pillow, svg"})
    editor.choose_avatar("me.png", canvas.getvalue())

    user = editor.save()

    assert user.avatar.startswith("/uploads/")
    assert session.user.bio == "Draws things"
    assert session.user.skills == ["pillow", "svg"]
    assert AuthSession(session.storage).user.avatar == user.avatar


def test_moderator_clears_a_reported_post(connect, promote):
    author, author_api = connect("Author")
    reporter, reporter_api = connect("Reporter")
    mod, mod_api = connect("Moderator")
    promote({"_id": mod.user_id})
    created = author_api.post("/posts", json={"title": "Borderline", "content": "Body", "category": "Python"})
    PostDetailController(created["_id"], reporter, reporter_api, UserInterface()).report("spam", "Looks like an ad")

    # the cached role is what gates the view, so sign in again after promotion
    AuthService(mod_api, mod).login("moderator@example.com", "secret123")
    queue = ModerationQueueController(mod, mod_api, UserInterface())
    assert [post.id for post in queue.open()] == [created["_id"]]
    assert queue.resolve(created["_id"], "approved")

    assert [post["_id"] for post in reporter_api.get("/posts")] == [created["_id"]]
