"""
Client-side projections of the portal's JSON payloads.

The server speaks camelCase with `_id` identifiers; these models expose
snake_case attributes and accept either spelling when validating. They are
transient copies of server state, replaced wholesale or patched field by
field after each successful call.
"""

from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PortalModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class UserRef(PortalModel):
    """Embedded author / commenter reference."""
    id: str = Field(alias="_id")
    name: str = ""
    avatar: Optional[str] = ""
    username: Optional[str] = None


class User(PortalModel):
    id: str = Field(alias="_id")
    name: str = ""
    email: str = ""
    role: str = "user"
    username: Optional[str] = None
    avatar: Optional[str] = ""
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    socials: Dict[str, Optional[str]] = Field(default_factory=dict)
    skills: List[str] = Field(default_factory=list)
    points: int = 0
    badges: List[dict] = Field(default_factory=list)
    followers: List[Union[str, UserRef]] = Field(default_factory=list)
    following: List[Union[str, UserRef]] = Field(default_factory=list)


class Attachment(PortalModel):
    name: str
    url: str
    type: str = "file"
    size: int = 0


class Votes(PortalModel):
    up: List[str] = Field(default_factory=list)
    down: List[str] = Field(default_factory=list)


class Answer(PortalModel):
    id: str = Field(alias="_id")
    content: str = ""
    author: Optional[UserRef] = None
    votes: Votes = Field(default_factory=Votes)
    is_accepted: bool = False
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def score(self) -> int:
        return len(self.votes.up) - len(self.votes.down)


class Comment(PortalModel):
    id: str = Field(alias="_id")
    text: str = ""
    user: Optional[UserRef] = None
    created_at: Optional[datetime] = None


class EditEntry(PortalModel):
    """One edit-history record; `changes` is a JSON string of `{field: {from, to}}`."""
    id: Optional[str] = Field(None, alias="_id")
    edited_by: Optional[dict] = None
    edited_at: Optional[datetime] = None
    reason: Optional[str] = None
    changes: Optional[str] = None


class IdleSummary(PortalModel):
    status: Literal["idle"] = "idle"


class ProcessingSummary(PortalModel):
    status: Literal["processing"] = "processing"


class ReadySummary(PortalModel):
    status: Literal["ready"] = "ready"
    tldr: str
    key_takeaways: List[str] = Field(default_factory=list)
    model: Optional[str] = None
    generated_at: Optional[datetime] = None


class ErrorSummary(PortalModel):
    status: Literal["error"] = "error"
    error: str = "Failed to generate summary"


Summary = Annotated[
    Union[IdleSummary, ProcessingSummary, ReadySummary, ErrorSummary],
    Field(discriminator="status"),
]
"""AI summary of a post, tagged by `status`."""


class Flag(PortalModel):
    """A report or automatic flag on a post; only moderators see these."""
    user: Optional[str] = None
    reason: str = "other"
    description: Optional[str] = ""
    created_at: Optional[datetime] = None


class Post(PortalModel):
    """
    A post aggregate.

    Feed and bookmark payloads carry no `content`, `answers`, `comments` or
    `editHistory`; those default to empty values.
    """
    id: str = Field(alias="_id")
    title: str = ""
    content: str = ""
    excerpt: Optional[str] = None
    author: Optional[UserRef] = None
    type: str = "article"
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    difficulty: Optional[str] = None
    visibility: Optional[str] = "public"
    views: int = 0
    likes: List[str] = Field(default_factory=list)
    bookmarks: List[str] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)
    answers: List[Answer] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    accepted_answer: Optional[str] = None
    is_edited: bool = False
    edit_history: List[EditEntry] = Field(default_factory=list)
    summary: Summary = Field(default_factory=IdleSummary)
    reading_time: Optional[int] = None
    slug: Optional[str] = None
    moderation_status: Optional[str] = None
    flags: List[Flag] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Collection(PortalModel):
    id: str = Field(alias="_id")
    name: str
    description: Optional[str] = ""
    posts: List[str] = Field(default_factory=list)
    is_public: bool = False
    created_at: Optional[datetime] = None


class PollOption(PortalModel):
    text: str
    votes: List[str] = Field(default_factory=list)


class Poll(PortalModel):
    id: str = Field(alias="_id")
    question: str
    author: Optional[UserRef] = None
    options: List[PollOption] = Field(default_factory=list)
    expires_at: Optional[datetime] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class Room(PortalModel):
    id: str = Field(alias="_id")
    name: str
    description: Optional[str] = ""
    icon: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    member_count: int = 0
    created_at: Optional[datetime] = None


class Project(PortalModel):
    id: str = Field(alias="_id")
    title: str
    description: str = ""
    cover_image: Optional[str] = None
    gallery_images: List[str] = Field(default_factory=list)
    repo_link: Optional[str] = None
    demo_link: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    author: Optional[UserRef] = None
    likes: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    views: int = 0
    is_featured: bool = False
    created_at: Optional[datetime] = None
