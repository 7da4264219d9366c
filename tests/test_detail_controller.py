import json

import httpx
import pytest

from portal.client.detail import PostDetailController
from portal.client.models import ErrorSummary, ReadySummary


@pytest.fixture
def detail(fake_server, session, ui, api_for, post_payload):
    fake_server.on("GET", "/posts/p1", post_payload())
    controller = PostDetailController("p1", session, api_for(session), ui)
    controller.load()
    return controller


@pytest.fixture
def own_detail(fake_server, author_session, ui, api_for, post_payload):
    fake_server.on("GET", "/posts/p1", post_payload())
    controller = PostDetailController("p1", author_session, api_for(author_session), ui)
    controller.load()
    return controller


def _answer(answer_id: str, accepted: bool = False) -> dict:
    return {"_id": answer_id, "content": "Use gather", "votes": {"up": [], "down": []}, "isAccepted": accepted}


def test_load_and_not_found(fake_server, session, ui, api_for, detail):
    assert detail.post.title == "Async IO in practice"
    assert detail.loading is False
    assert detail.not_found is False

    missing = PostDetailController("nope", session, api_for(session), ui)
    missing.load()
    assert missing.post is None
    assert missing.not_found is True


def test_failed_reload_keeps_previous_aggregate(fake_server, detail):
    fake_server.on("GET", "/posts/p1", {"message": "Server error"}, status=500)

    detail.load()

    assert detail.post.id == "p1"
    assert detail.not_found is False


def test_anonymous_like_redirects_without_request(fake_server, anonymous, ui, api_for, post_payload):
    fake_server.on("GET", "/posts/p1", post_payload())
    controller = PostDetailController("p1", anonymous, api_for(anonymous), ui)
    controller.load()

    controller.like()
    controller.bookmark()

    assert ui.location == "/login"
    assert fake_server.calls("PUT") == []


def test_like_replaces_likes(fake_server, detail):
    fake_server.on("PUT", "/posts/p1/like", ["someone", "reader"])

    detail.like()

    assert detail.post.likes == ["someone", "reader"]
    assert detail.is_liked


def test_bookmark_uses_server_flag_and_count(fake_server, detail):
    fake_server.on("PUT", "/posts/p1/bookmark", {"isBookmarked": True, "bookmarksCount": 3})

    detail.bookmark()

    assert detail.is_saved
    assert detail.bookmarks_count == 3


def test_submit_comment_clears_buffer_and_reloads(fake_server, detail, post_payload):
    def add_comment(request):
        fake_server.on("GET", "/posts/p1", post_payload(comments=[{"_id": "c1", "text": "Great"}]))
        return httpx.Response(201, json=[{"_id": "c1", "text": "Great"}])

    fake_server.on("POST", "/posts/p1/comment", handler=add_comment)

    assert detail.submit_response("Great") is True

    assert detail.response_text == ""
    assert [c.text for c in detail.post.comments] == ["Great"]
    assert json.loads(fake_server.calls("POST")[0].content) == {"text": "Great"}


def test_submit_answer_for_questions_and_failure_keeps_text(fake_server, session, ui, api_for, post_payload):
    fake_server.on("GET", "/posts/p1", post_payload(type="question"))
    fake_server.on("POST", "/posts/p1/answers", {"message": "Answer content is required"}, status=400)
    controller = PostDetailController("p1", session, api_for(session), ui)
    controller.load()

    assert controller.submit_response("Use asyncio.gather") is False

    assert controller.response_text == "Use asyncio.gather"
    assert ui.alerts == ["Failed to submit"]


def test_only_author_accepts_answers(fake_server, detail):
    detail.accept_answer("a1")

    assert detail.ui.alerts == ["Only the author can accept an answer"]
    assert fake_server.calls("PUT") == []


def test_accept_answer_replaces_answers(fake_server, own_detail):
    fake_server.on("PUT", "/posts/p1/answers/a2/accept", [_answer("a1"), _answer("a2", accepted=True)])

    own_detail.accept_answer("a2")

    assert [a.id for a in own_detail.post.answers if a.is_accepted] == ["a2"]
    assert own_detail.post.accepted_answer == "a2"


def test_vote_answer_replaces_one_answer(fake_server, detail, post_payload):
    fake_server.on("GET", "/posts/p1", post_payload(answers=[_answer("a1"), _answer("a2")]))
    detail.load()
    voted = _answer("a1")
    voted["votes"] = {"up": ["reader"], "down": []}
    fake_server.on("PUT", "/posts/p1/answers/a1/vote", voted)

    detail.vote_answer("a1", "up")

    assert detail.post.answers[0].score == 1
    assert detail.post.answers[1].score == 0
    assert json.loads(fake_server.calls("PUT")[0].content) == {"type": "up"}
    with pytest.raises(ValueError):
        detail.vote_answer("a1", "sideways")


def test_summary_goes_processing_then_ready(fake_server, detail):
    seen = {}

    def summarize(request):
        seen["status"] = detail.post.summary.status
        seen["processing"] = detail.is_summary_processing
        return httpx.Response(
            200,
            json={"status": "ready", "tldr": "Coroutines.", "keyTakeaways": ["await"], "model": "gpt-4o-mini"},
        )

    fake_server.on("POST", "/posts/p1/summary", handler=summarize)

    detail.generate_summary()

    assert seen == {"status": "processing", "processing": True}
    assert isinstance(detail.post.summary, ReadySummary)
    assert detail.post.summary.key_takeaways == ["await"]
    assert not detail.is_summary_processing


def test_summary_failure_records_server_message(fake_server, detail):
    fake_server.on("POST", "/posts/p1/summary", {"message": "AI summaries are not configured"}, status=501)

    detail.generate_summary()

    assert detail.post.summary == ErrorSummary(error="AI summaries are not configured")
    assert detail.ui.alerts == ["AI summaries are not configured"]


def test_summary_network_failure_uses_generic_message(detail):
    def refuse(request):
        raise httpx.ConnectError("down", request=request)

    detail.api.http = httpx.Client(transport=httpx.MockTransport(refuse))

    detail.generate_summary()

    assert detail.post.summary.error == "Failed to generate summary"


def test_summary_is_not_restarted_while_processing(fake_server, session, ui, api_for, post_payload):
    fake_server.on("GET", "/posts/p1", post_payload(summary={"status": "processing"}))
    controller = PostDetailController("p1", session, api_for(session), ui)
    controller.load()

    controller.generate_summary()

    assert fake_server.calls("POST") == []
    assert controller.post.summary.status == "processing"


def test_collection_toggle_patches_one_collection(fake_server, detail):
    fake_server.on(
        "GET",
        "/users/collections",
        {"collections": [{"_id": "c1", "name": "Later", "posts": []}, {"_id": "c2", "name": "Async", "posts": ["p1"]}]},
    )
    fake_server.on("POST", "/users/collections/c1/posts", {"collection": {"_id": "c1", "name": "Later", "posts": ["p1"]}})
    fake_server.on("DELETE", "/users/collections/c2/posts/p1", {"collection": {"_id": "c2", "name": "Async", "posts": []}})
    detail.load_collections()

    detail.toggle_collection_membership("c1")
    detail.toggle_collection_membership("c2")

    assert detail.in_collection("c1")
    assert not detail.in_collection("c2")
    assert json.loads(fake_server.calls("POST")[0].content) == {"postId": "p1"}


def test_create_collection_ignores_blank_names(fake_server, detail):
    fake_server.on("POST", "/users/collections", {"collections": [{"_id": "c1", "name": "Later"}]})

    detail.create_collection("   ")
    detail.create_collection("Later")

    assert len(fake_server.calls("POST")) == 1
    assert [c.name for c in detail.collections] == ["Later"]
    assert detail.new_collection_name == ""


def test_edit_post_sends_split_tags(fake_server, own_detail, post_payload):
    fake_server.on("PUT", "/posts/p1", post_payload(title="Async IO, revised", tags=["asyncio", "trio"], isEdited=True))
    own_detail.start_editing()

    assert own_detail.edit_post(title="Async IO, revised", tags="asyncio, trio, ") is True

    sent = json.loads(fake_server.calls("PUT")[0].content)
    assert sent["tags"] == ["asyncio", "trio"]
    assert sent["editReason"] == "Updated post"
    assert own_detail.post.title == "Async IO, revised"
    assert own_detail.is_editing is False


def test_non_author_cannot_edit(fake_server, detail):
    assert detail.edit_post(title="Mine now") is False
    assert fake_server.calls("PUT") == []


def test_delete_confirms_then_navigates_home(fake_server, own_detail):
    fake_server.on("DELETE", "/posts/p1", {"message": "Post removed"})

    own_detail.ui.confirm_answer = False
    assert own_detail.delete_post() is False
    own_detail.ui.confirm_answer = True
    assert own_detail.delete_post() is True

    assert len(fake_server.calls("DELETE")) == 1
    assert own_detail.ui.location == "/"


def test_report_normalises_reason(fake_server, detail):
    fake_server.on("POST", "/posts/p1/report", {"message": "Report received", "moderationStatus": "pending"})

    assert detail.report("Shouting", "caps everywhere") is True
    assert detail.report("SPAM") is True

    sent = [json.loads(r.content)["reason"] for r in fake_server.calls("POST")]
    assert sent == ["other", "spam"]
    assert detail.ui.alerts[-1] == "Thanks. Your report has been submitted."


def test_follow_author(fake_server, detail):
    fake_server.on("GET", "/users/author", {"user": {"_id": "author", "followers": [{"_id": "reader"}]}})
    fake_server.on("PUT", "/users/author/follow", {"isFollowing": False, "followersCount": 0})

    assert detail.load_follow_status() is True
    detail.toggle_follow_author()

    assert detail.is_following_author is False


def test_derived_counts(fake_server, session, ui, api_for, post_payload):
    fake_server.on(
        "GET",
        "/posts/p1",
        post_payload(
            type="question",
            views=8,
            answers=[_answer("a1")],
            comments=[{"_id": "c1", "text": "?"}],
            updatedAt="2024-05-01T10:05:00Z",
            editHistory=[{"_id": "e1", "reason": "typo", "changes": '{"title": {"from": "a", "to": "b"}}'}],
        ),
    )
    controller = PostDetailController("p1", session, api_for(session), ui)
    controller.load()

    assert controller.total_comments == 2
    assert controller.comment_rate == 25
    assert controller.show_updated_badge
    assert controller.last_edit.reason == "typo"
    assert controller.parse_changes(controller.last_edit.changes) == {"title": {"from": "a", "to": "b"}}
    assert controller.parse_changes("{broken") is None


def test_comment_rate_rounds_halves_up(fake_server, session, ui, api_for, post_payload):
    fake_server.on("GET", "/posts/p1", post_payload(views=8, comments=[{"_id": "c1", "text": "Nice"}]))
    controller = PostDetailController("p1", session, api_for(session), ui)
    controller.load()

    assert controller.comment_rate == 13
