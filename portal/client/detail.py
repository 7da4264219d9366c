"""
Post detail controller
======================

Loads one post aggregate (post + answers, comments, edit history, summary)
and runs every user action of the detail view against it.

Key rules
---------
- `load()` replaces the whole aggregate on success; on failure the previous
  aggregate is kept and `not_found` is set when there is nothing to show.
- Actions that need an account redirect to `/login` without any request
  when the session is anonymous.
- Server responses replace the affected sub-field (likes list, bookmark
  flag, answers list, one answer, summary) instead of being merged.
- New answers and comments are not inserted locally; the aggregate is
  re-fetched so server-computed ids and timestamps are picked up.
- Failures are logged and shown through `UserInterface.alert` or as inline
  state. Nothing is retried; `*_loading` flags block re-entry where present.
"""

import json
import logging
from datetime import timedelta
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from portal.client import pdf_export
from portal.client.api import ApiClient, ApiError
from portal.client.config import client_settings
from portal.client.helpers import percent
from portal.client.interface import UserInterface
from portal.client.models import (
    Answer,
    Collection,
    EditEntry,
    ErrorSummary,
    Post,
    ProcessingSummary,
    ReadySummary,
)
from portal.client.session import AuthSession
from portal.client.state import transition
from portal.client.toc import Heading, extract_headings

logger = logging.getLogger(__name__)

REPORT_REASONS = ("spam", "inappropriate", "duplicate", "off-topic", "other")
UPDATED_BADGE_THRESHOLD = timedelta(seconds=60)
EDITABLE_FIELDS = ("title", "content", "tags", "category", "visibility", "type", "difficulty")


class PostDetailController:
    """
    State and actions of the post detail view.

    Parameters
    ----------
    post_id : str
        Id of the post to show.
    session : AuthSession
        Current auth session (read only here).
    api : ApiClient
        HTTP client for the portal API.
    ui : UserInterface
        Navigation and alerts.
    """

    def __init__(self, post_id: str, session: AuthSession, api: ApiClient, ui: UserInterface):
        self.post_id = post_id
        self.session = session
        self.api = api
        self.ui = ui

        self.post: Optional[Post] = None
        self.loading = True
        self.not_found = False

        self.response_text = ""
        self.saved = False
        self.bookmarks_count = 0
        self.summary_loading = False

        self.collections: List[Collection] = []
        self.collections_loading = False
        self.new_collection_name = ""
        self.creating_collection = False

        self.is_following_author = False
        self.follow_loading = False

        self.is_editing = False
        self.edit_form: Dict[str, Union[str, List[str], None]] = {}

        self.is_pdf_generating = False

    # ------------------------------------------------------------------ load

    def load(self) -> Optional[Post]:
        try:
            data = self.api.get(f"/posts/{self.post_id}")
            self._replace(Post.model_validate(data.get("post", data)))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching post {self.post_id}: {e}")
            self.not_found = self.post is None
        finally:
            self.loading = False
        return self.post

    def _replace(self, post: Post) -> None:
        self.post = post
        self.not_found = False
        user_id = self.session.user_id
        self.saved = bool(user_id) and user_id in post.bookmarks
        self.bookmarks_count = len(post.bookmarks)

    def _require_login(self) -> bool:
        if not self.session.is_authenticated:
            self.ui.navigate("/login")
            return False
        return True

    # ------------------------------------------------------- derived state

    @property
    def is_author(self) -> bool:
        return bool(self.post and self.post.author and self.session.user_id == self.post.author.id)

    @property
    def is_liked(self) -> bool:
        user_id = self.session.user_id
        return bool(self.post and user_id and user_id in self.post.likes)

    @property
    def is_saved(self) -> bool:
        return self.saved

    @property
    def is_summary_processing(self) -> bool:
        return self.summary_loading or bool(self.post and self.post.summary.status == "processing")

    @property
    def last_edit(self) -> Optional[EditEntry]:
        if not self.post or not self.post.edit_history:
            return None
        return self.post.edit_history[-1]

    @property
    def show_updated_badge(self) -> bool:
        if not self.post or not self.post.updated_at or not self.post.created_at:
            return False
        return abs(self.post.updated_at - self.post.created_at) > UPDATED_BADGE_THRESHOLD

    @property
    def total_comments(self) -> int:
        if not self.post:
            return 0
        if self.post.type == "question":
            return len(self.post.answers) + len(self.post.comments)
        return len(self.post.comments)

    @property
    def comment_rate(self) -> int:
        """Responses per hundred views."""
        if not self.post or not self.post.views:
            return 0
        return percent(self.total_comments, self.post.views)

    @property
    def table_of_contents(self) -> List[Heading]:
        return extract_headings(self.post.content) if self.post else []

    @staticmethod
    def parse_changes(changes: Optional[str]) -> Optional[dict]:
        """Decode an edit-history `changes` string; None when absent or malformed."""
        if not changes:
            return None
        try:
            parsed = json.loads(changes)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None

    # ------------------------------------------------------ simple toggles

    def like(self) -> None:
        if not self._require_login():
            return
        try:
            likes = self.api.put(f"/posts/{self.post_id}/like")
            if self.post:
                self.post.likes = list(likes)
        except ApiError as e:
            logger.error(f"Error liking post {self.post_id}: {e.message}")

    def bookmark(self) -> None:
        if not self._require_login():
            return
        try:
            data = self.api.put(f"/posts/{self.post_id}/bookmark")
            self.saved = bool(data.get("isBookmarked"))
            self.bookmarks_count = int(data.get("bookmarksCount", self.bookmarks_count))
        except ApiError as e:
            logger.error(f"Error saving post {self.post_id}: {e.message}")

    # ---------------------------------------------------- answers/comments

    def submit_response(self, text: Optional[str] = None) -> bool:
        """
        Post an answer (questions) or a comment (everything else).

        The input buffer is cleared and the aggregate re-fetched only when the
        server accepted the response.
        """
        if not self._require_login():
            return False
        if text is not None:
            self.response_text = text
        try:
            if self.post and self.post.type == "question":
                self.api.post(f"/posts/{self.post_id}/answers", json={"content": self.response_text})
            else:
                self.api.post(f"/posts/{self.post_id}/comment", json={"text": self.response_text})
        except ApiError as e:
            logger.error(f"Error submitting response to {self.post_id}: {e.message}")
            self.ui.alert("Failed to submit")
            return False
        self.response_text = ""
        self.load()
        return True

    def accept_answer(self, answer_id: str) -> None:
        if not self.is_author:
            self.ui.alert("Only the author can accept an answer")
            return
        try:
            data = self.api.put(f"/posts/{self.post_id}/answers/{answer_id}/accept")
        except ApiError as e:
            logger.error(f"Failed to accept answer {answer_id}: {e.message}")
            return
        self.post.answers = [Answer.model_validate(item) for item in data]
        self.post.accepted_answer = answer_id

    def vote_answer(self, answer_id: str, direction: str) -> None:
        if direction not in ("up", "down"):
            raise ValueError(f"Unknown vote direction {direction!r}")
        if not self._require_login():
            return
        try:
            data = self.api.put(f"/posts/{self.post_id}/answers/{answer_id}/vote", json={"type": direction})
        except ApiError as e:
            logger.error(f"Failed to vote on answer {answer_id}: {e.message}")
            return
        if self.post:
            updated = Answer.model_validate(data)
            self.post.answers = [updated if answer.id == answer_id else answer for answer in self.post.answers]

    # ------------------------------------------------------------- summary

    def generate_summary(self) -> None:
        """
        Generate the AI summary.

        The summary becomes `processing` before the request is sent, then
        `ready` with the server's document, or `error` with the server's
        message (also alerted).
        """
        if not self._require_login() or not self.post:
            return
        if self.is_summary_processing:
            return
        transition(self.post.summary.status, "processing")
        self.summary_loading = True
        self.post.summary = ProcessingSummary()
        try:
            data = self.api.post(f"/posts/{self.post_id}/summary")
            summary = ReadySummary.model_validate(data)
            transition(self.post.summary.status, summary.status)
            self.post.summary = summary
        except (ApiError, ValidationError) as e:
            message = e.message if isinstance(e, ApiError) and e.status is not None else "Failed to generate summary"
            transition(self.post.summary.status, "error")
            self.post.summary = ErrorSummary(error=message)
            logger.error(f"Failed to generate summary for {self.post_id}: {e}")
            self.ui.alert(message)
        finally:
            self.summary_loading = False

    # --------------------------------------------------------- collections

    def load_collections(self) -> List[Collection]:
        self.collections_loading = True
        try:
            data = self.api.get("/users/collections")
            self.collections = [Collection.model_validate(item) for item in data.get("collections", [])]
        except ApiError as e:
            logger.error(f"Failed to load collections: {e.message}")
        finally:
            self.collections_loading = False
        return self.collections

    def create_collection(self, name: Optional[str] = None) -> None:
        if name is not None:
            self.new_collection_name = name
        if not self.new_collection_name.strip() or self.creating_collection:
            return
        self.creating_collection = True
        try:
            data = self.api.post("/users/collections", json={"name": self.new_collection_name.strip()})
            self.collections = [Collection.model_validate(item) for item in data.get("collections", [])]
            self.new_collection_name = ""
        except ApiError as e:
            logger.error(f"Failed to create collection: {e.message}")
        finally:
            self.creating_collection = False

    def in_collection(self, collection_id: str) -> bool:
        collection = next((c for c in self.collections if c.id == collection_id), None)
        return bool(self.post and collection and self.post.id in collection.posts)

    def toggle_collection_membership(self, collection_id: str) -> None:
        """Add the post to, or remove it from, one collection; only that collection is patched."""
        if not self.post:
            return
        post_id = self.post.id
        try:
            if self.in_collection(collection_id):
                self.api.delete(f"/users/collections/{collection_id}/posts/{post_id}")
                self._patch_collection(collection_id, lambda posts: [p for p in posts if p != post_id])
            else:
                self.api.post(f"/users/collections/{collection_id}/posts", json={"postId": post_id})
                self._patch_collection(collection_id, lambda posts: [*posts, post_id])
        except ApiError as e:
            logger.error(f"Failed to update collection {collection_id}: {e.message}")

    def _patch_collection(self, collection_id: str, change) -> None:
        self.collections = [
            c.model_copy(update={"posts": change(list(c.posts))}) if c.id == collection_id else c
            for c in self.collections
        ]

    # ------------------------------------------------------------- editing

    def start_editing(self) -> None:
        if not self.post or not self.is_author:
            return
        self.edit_form = {
            "title": self.post.title,
            "content": self.post.content,
            "tags": ", ".join(self.post.tags),
            "category": self.post.category or "",
            "visibility": self.post.visibility or "public",
            "type": self.post.type or "article",
            "difficulty": self.post.difficulty or "Beginner",
            "editReason": "",
        }
        self.is_editing = True

    def cancel_editing(self) -> None:
        self.is_editing = False

    def edit_post(self, **fields) -> bool:
        """
        Save an edit of the post (author only).

        Keyword arguments override the edit form; `tags` may be a comma
        separated string or a list. The returned post replaces the aggregate.
        """
        if not self._require_login():
            return False
        if not self.post or not self.is_author:
            self.ui.alert("Only the author can edit this post")
            return False
        form = {**self.edit_form, **fields}
        tags = form.get("tags", self.post.tags)
        if isinstance(tags, str):
            tags = [tag.strip() for tag in tags.split(",") if tag.strip()]
        payload = {field: form[field] for field in EDITABLE_FIELDS if field in form and field != "tags"}
        payload["tags"] = list(tags or [])
        payload["category"] = form.get("category") or self.post.category
        payload["editReason"] = form.get("editReason") or "Updated post"
        try:
            data = self.api.put(f"/posts/{self.post_id}", json=payload)
            self._replace(Post.model_validate(data.get("post", data)))
        except (ApiError, ValidationError) as e:
            logger.error(f"Failed to update post {self.post_id}: {e}")
            self.ui.alert("Failed to update post")
            return False
        self.is_editing = False
        return True

    def delete_post(self) -> bool:
        if not self.ui.confirm("Are you sure you want to delete this post?"):
            return False
        try:
            self.api.delete(f"/posts/{self.post_id}")
        except ApiError as e:
            logger.error(f"Failed to delete post {self.post_id}: {e.message}")
            self.ui.alert("Failed to delete post")
            return False
        self.ui.navigate("/")
        return True

    # -------------------------------------------------------------- social

    def load_follow_status(self) -> bool:
        author = self.post.author if self.post else None
        user_id = self.session.user_id
        if not author or not user_id or author.id == user_id:
            self.is_following_author = False
            return False
        try:
            data = self.api.get(f"/users/{author.id}")
            followers = (data.get("user") or {}).get("followers") or []
            self.is_following_author = any(
                (follower.get("_id") if isinstance(follower, dict) else follower) == user_id for follower in followers
            )
        except ApiError as e:
            logger.error(f"Failed to load follow status: {e.message}")
        return self.is_following_author

    def toggle_follow_author(self) -> None:
        if not self.post or not self.post.author:
            return
        if not self._require_login() or self.follow_loading:
            return
        self.follow_loading = True
        try:
            data = self.api.put(f"/users/{self.post.author.id}/follow")
            self.is_following_author = bool(data.get("isFollowing"))
        except ApiError as e:
            logger.error(f"Failed to toggle follow: {e.message}")
        finally:
            self.follow_loading = False

    def report(self, reason: str = "other", description: str = "") -> bool:
        if not self._require_login():
            return False
        normalized = (reason or "other").strip().lower()
        if normalized not in REPORT_REASONS:
            normalized = "other"
        try:
            self.api.post(f"/posts/{self.post_id}/report", json={"reason": normalized, "description": description or ""})
        except ApiError as e:
            logger.error(f"Failed to report post {self.post_id}: {e.message}")
            self.ui.alert("Failed to report post")
            return False
        self.ui.alert("Thanks. Your report has been submitted.")
        return True

    # ----------------------------------------------------------------- pdf

    def export_to_pdf(self, dest_dir: Optional[str] = None) -> Optional[str]:
        """Write the post as a paginated image PDF; returns the file path."""
        if not self.post or self.is_pdf_generating:
            return None
        self.is_pdf_generating = True
        try:
            return pdf_export.export_post(self.post, dest_dir or client_settings.EXPORT_DIR)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to generate PDF for {self.post_id}: {e}")
            self.ui.alert("Failed to generate PDF")
            return None
        finally:
            self.is_pdf_generating = False
