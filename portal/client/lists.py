"""
List view controllers: bookmarks, community (rooms + polls), project gallery,
project detail and the moderation queue.

A list controller owns one in-memory array. `fetch_all()` replaces it,
`sort()` is a pure function over it, and single-item mutations are merged
back by id (`replace_item` / `remove_item`). When the new state of an item
cannot be derived locally the list is fetched again instead.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generic, List, Optional, Sequence, Set, TypeVar

from pydantic import BaseModel, ValidationError

from portal.client.api import ApiClient, ApiError
from portal.client.cache import BOOKMARKS_CACHE_KEY, SessionCache
from portal.client.interface import UserInterface
from portal.client.models import Comment, Poll, Post, Project, Room
from portal.client.poll_widget import PollWidget
from portal.client.session import AuthSession

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=BaseModel)

MODERATOR_ROLES = ("admin", "moderator")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created(item: Any) -> datetime:
    return getattr(item, "created_at", None) or _EPOCH


class ListViewController(Generic[ItemT]):
    """
    Base list controller.

    Subclasses set `endpoint` and `model`, and override `extract()` when the
    list is wrapped in an envelope.
    """

    endpoint: str = ""
    model: type = BaseModel

    def __init__(self, session: AuthSession, api: ApiClient, ui: UserInterface):
        self.session = session
        self.api = api
        self.ui = ui
        self.items: List[ItemT] = []
        self.loading = True

    def extract(self, data: Any) -> list:
        return list(data or [])

    def parse(self, raw: Sequence[dict]) -> List[ItemT]:
        return [self.model.model_validate(item) for item in raw]

    def params(self) -> Optional[dict]:
        return None

    def fetch_all(self) -> List[ItemT]:
        try:
            raw = self.extract(self.api.get(self.endpoint, params=self.params()))
            self.items = self.parse(raw)
            self.on_fetched(raw)
        except (ApiError, ValidationError) as e:
            logger.error(f"Failed to load {self.endpoint}: {e}")
        finally:
            self.loading = False
        return self.items

    def on_fetched(self, raw: list) -> None:
        pass

    def sort(self, items: Sequence[ItemT], by: str) -> List[ItemT]:
        return list(items)

    def find(self, item_id: str) -> Optional[ItemT]:
        return next((item for item in self.items if item.id == item_id), None)

    def replace_item(self, item_id: str, **patch) -> None:
        self.items = [item.model_copy(update=patch) if item.id == item_id else item for item in self.items]

    def remove_item(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]

    def _require_login(self) -> bool:
        if not self.session.is_authenticated:
            self.ui.navigate("/login")
            return False
        return True


class BookmarksController(ListViewController[Post]):
    """
    The caller's bookmarked posts.

    `open()` paints a cached list first when one younger than the cache TTL
    exists, then always fetches and rewrites the cache.
    """

    endpoint = "/users/bookmarks"
    model = Post

    def __init__(self, session: AuthSession, api: ApiClient, ui: UserInterface, cache: SessionCache):
        super().__init__(session, api, ui)
        self.cache = cache
        self.painted_from_cache = False

    def extract(self, data: Any) -> list:
        return list((data or {}).get("bookmarks") or [])

    def on_fetched(self, raw: list) -> None:
        self.cache.write(BOOKMARKS_CACHE_KEY, raw)

    def open(self) -> List[Post]:
        cached = self.cache.read(BOOKMARKS_CACHE_KEY)
        if isinstance(cached, list):
            try:
                self.items = self.parse(cached)
                self.loading = False
                self.painted_from_cache = True
            except ValidationError as e:
                logger.debug(f"Ignoring cached bookmarks: {e}")
        return self.fetch_all()

    def sort(self, items: Sequence[Post], by: str = "recent") -> List[Post]:
        """
        `recent`: newest bookmark first (reverse of the server order);
        `liked`: most likes first, ties keep their order;
        `type`: alphabetical by post type.
        """
        if by == "liked":
            return sorted(items, key=lambda post: len(post.likes), reverse=True)
        if by == "type":
            return sorted(items, key=lambda post: post.type or "")
        return list(reversed(items))

    def like(self, post_id: str) -> None:
        if not self._require_login():
            return
        try:
            likes = self.api.put(f"/posts/{post_id}/like")
            self.replace_item(post_id, likes=list(likes))
        except ApiError as e:
            logger.error(f"Error liking post {post_id}: {e.message}")

    def toggle_bookmark(self, post_id: str) -> None:
        if not self._require_login():
            return
        try:
            data = self.api.put(f"/posts/{post_id}/bookmark")
        except ApiError as e:
            logger.error(f"Error saving post {post_id}: {e.message}")
            return
        if data and data.get("isBookmarked") is False:
            self.remove_item(post_id)
            return
        self.fetch_all()

    def delete(self, post_id: str) -> None:
        if not self._require_login():
            return
        if not self.ui.confirm("Delete this post? This cannot be undone."):
            return
        try:
            self.api.delete(f"/posts/{post_id}")
            self.remove_item(post_id)
        except ApiError as e:
            logger.error(f"Error deleting post {post_id}: {e.message}")


class CommunityController(ListViewController[Room]):
    """Rooms (the main list) and active polls."""

    endpoint = "/community/rooms"
    model = Room

    def __init__(self, session: AuthSession, api: ApiClient, ui: UserInterface):
        super().__init__(session, api, ui)
        self.polls: List[Poll] = []

    def fetch_all(self) -> List[Room]:
        try:
            rooms = self.api.get("/community/rooms")
            polls = self.api.get("/community/polls")
            self.items = self.parse(rooms or [])
            self.polls = [Poll.model_validate(poll) for poll in polls or []]
        except (ApiError, ValidationError) as e:
            logger.error(f"Failed to load community: {e}")
        finally:
            self.loading = False
        return self.items

    @property
    def rooms(self) -> List[Room]:
        return self.items

    def sort(self, items: Sequence[Room], by: str = "recent") -> List[Room]:
        if by == "members":
            return sorted(items, key=lambda room: room.member_count, reverse=True)
        if by == "name":
            return sorted(items, key=lambda room: room.name.lower())
        return sorted(items, key=_created, reverse=True)

    def filter_by_topic(self, topic: Optional[str]) -> List[Room]:
        if not topic:
            return list(self.items)
        wanted = topic.strip().lower()
        return [room for room in self.items if any(t.strip().lower() == wanted for t in room.topics)]

    def poll_widgets(self) -> List[PollWidget]:
        return [PollWidget(poll, self.session, self.api, self.ui, on_vote=self.fetch_all) for poll in self.polls]

    def create_poll(self, question: str, options: Sequence[str] | str, days: int = 7) -> bool:
        if not self.session.is_authenticated:
            self.ui.alert("Login required")
            return False
        if isinstance(options, str):
            options = options.split(",")
        labels = [option.strip() for option in options]
        if not question or not labels:
            return False
        expires_at = datetime.now(timezone.utc) + timedelta(days=days)
        try:
            self.api.post(
                "/community/polls",
                json={"question": question, "options": labels, "expiresAt": expires_at.isoformat()},
            )
        except ApiError as e:
            logger.error(f"Failed to create poll: {e.message}")
            self.ui.alert("Failed to create poll")
            return False
        self.fetch_all()
        return True

    def create_room(self, name: str, description: str = "", topics: Sequence[str] | str | None = None) -> bool:
        if not self.session.is_authenticated:
            self.ui.alert("Login required")
            return False
        if not name:
            return False
        if isinstance(topics, str):
            topics = topics.split(",")
        try:
            self.api.post(
                "/community/rooms",
                json={"name": name, "description": description, "topics": list(topics or []), "icon": "💬"},
            )
        except ApiError as e:
            logger.error(f"Failed to create room: {e.message}")
            self.ui.alert("Failed to create room")
            return False
        self.fetch_all()
        return True


class ProjectGalleryController(ListViewController[Project]):
    endpoint = "/projects"
    model = Project

    def __init__(self, session: AuthSession, api: ApiClient, ui: UserInterface, tag: Optional[str] = None, order: Optional[str] = None):
        super().__init__(session, api, ui)
        self.tag = tag
        self.order = order

    def params(self) -> Optional[dict]:
        return {"tag": self.tag, "sort": self.order}

    def sort(self, items: Sequence[Project], by: str = "popular") -> List[Project]:
        if by == "newest":
            return sorted(items, key=_created, reverse=True)
        if by == "oldest":
            return sorted(items, key=_created)
        return sorted(items, key=lambda p: (len(p.likes), p.views), reverse=True)

    def search(self, query: str = "", tag_filter: str = "All") -> List[Project]:
        """Title/tag substring search plus the tag chip filter ('All' disables it)."""
        result = list(self.items)
        if query:
            needle = query.lower()
            result = [p for p in result if needle in p.title.lower() or any(needle in t.lower() for t in p.tags)]
        if tag_filter and tag_filter != "All":
            chip = tag_filter.lower()
            result = [p for p in result if any(chip in t.lower() for t in p.tags)]
        return result

    def like(self, project_id: str) -> None:
        if not self._require_login():
            return
        try:
            likes = self.api.put(f"/projects/{project_id}/like")
            self.replace_item(project_id, likes=list(likes))
        except ApiError as e:
            logger.error(f"Error liking project {project_id}: {e.message}")


class ProjectDetailController:
    def __init__(self, project_id: str, session: AuthSession, api: ApiClient, ui: UserInterface):
        self.project_id = project_id
        self.session = session
        self.api = api
        self.ui = ui
        self.project: Optional[Project] = None
        self.loading = True
        self.comment_text = ""

    def load(self) -> Optional[Project]:
        try:
            self.project = Project.model_validate(self.api.get(f"/projects/{self.project_id}"))
        except (ApiError, ValidationError) as e:
            logger.error(f"Failed to load project {self.project_id}: {e}")
        finally:
            self.loading = False
        return self.project

    def like(self) -> None:
        if not self.session.is_authenticated:
            self.ui.navigate("/login")
            return
        try:
            likes = self.api.put(f"/projects/{self.project_id}/like")
            if self.project:
                self.project.likes = list(likes)
        except ApiError as e:
            logger.error(f"Error liking project {self.project_id}: {e.message}")

    def comment(self, text: Optional[str] = None) -> bool:
        if text is not None:
            self.comment_text = text
        if not self.session.is_authenticated:
            self.ui.navigate("/login")
            return False
        try:
            data = self.api.post(f"/projects/{self.project_id}/comments", json={"text": self.comment_text})
        except ApiError as e:
            logger.error(f"Error commenting on project {self.project_id}: {e.message}")
            return False
        if self.project:
            self.project.comments = [Comment.model_validate(item) for item in data]
        self.comment_text = ""
        return True


class ModerationQueueController(ListViewController[Post]):
    """
    Flagged and pending posts for moderators.

    Non-moderators get an empty queue without a request. Resolving a post
    removes it from the local list; the queue is not fetched again.
    """

    endpoint = "/moderation/posts"
    model = Post

    def __init__(self, session: AuthSession, api: ApiClient, ui: UserInterface):
        super().__init__(session, api, ui)
        self.notes: Dict[str, str] = {}
        self.resolving: Set[str] = set()
        self.error = ""

    @property
    def is_moderator(self) -> bool:
        user = self.session.user
        return user is not None and user.role in MODERATOR_ROLES

    def open(self) -> List[Post]:
        if not self.is_moderator:
            self.loading = False
            return []
        return self.fetch_all()

    def fetch_all(self) -> List[Post]:
        self.error = ""
        try:
            self.items = self.parse(self.api.get(self.endpoint) or [])
        except ApiError as e:
            logger.error(f"Failed to load moderation queue: {e.message}")
            self.error = e.message or "Failed to load moderation queue"
        except ValidationError as e:
            logger.error(f"Failed to load moderation queue: {e}")
            self.error = "Failed to load moderation queue"
        finally:
            self.loading = False
        return self.items

    @staticmethod
    def reasons(post: Post) -> List[str]:
        """Flag reasons to display; posts queued by the term filter alone read 'auto-flagged'."""
        return [flag.reason for flag in post.flags] or ["auto-flagged"]

    def resolve(self, post_id: str, status: str) -> bool:
        """Approve or reject a post, sending the note typed for it (if any)."""
        if post_id in self.resolving:
            return False
        self.resolving.add(post_id)
        try:
            self.api.put(f"/moderation/posts/{post_id}", json={"status": status, "note": self.notes.get(post_id, "")})
        except ApiError as e:
            logger.error(f"Failed to resolve post {post_id}: {e.message}")
            self.ui.alert(e.message or "Failed to resolve post")
            return False
        finally:
            self.resolving.discard(post_id)
        self.remove_item(post_id)
        self.notes.pop(post_id, None)
        return True
