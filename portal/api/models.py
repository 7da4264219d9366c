"""
Pydantic models used for request validation and API data contracts.

Each class defines the structure of a JSON body accepted by an endpoint,
ensuring validation and automatic OpenAPI schema generation. Field names
follow the client's camelCase wire format.

Required-field checks that must answer with the portal's own 400 messages
(e.g. "Title, content, and category are required") are left to the service
layer, so those fields are declared Optional here.
"""

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field


class FileRec(BaseModel):
    """Metadata for an uploaded/stored file, as attached to posts."""
    name: str = Field(..., description="Original filename as provided by the client.", examples=["report.pdf"])
    url: str = Field(..., description="Public URL under the uploads mount.", examples=["/uploads/3f2a.pdf"])
    type: str = Field(..., description="'pdf' or 'image' (anything else is 'file').", examples=["pdf"])
    size: int = Field(0, description="Size in bytes.")


class RegisterDetails(BaseModel):
    """
    Represents the registration form.
    """
    name: Optional[str] = None
    """Display name."""
    email: Optional[str] = None
    """E-mail address (normalised server side)."""
    password: Optional[str] = None
    """Plaintext password, hashed before storage."""


class UserCredentials(BaseModel):
    """
    Represents login credentials for a user.
    """
    email: Optional[str] = None
    """The e-mail address of the user."""
    password: Optional[str] = None
    """The plaintext password provided for authentication."""


class GoogleAuthDetails(BaseModel):
    """
    Google sign-in request: an OAuth access token plus the intent.
    """
    token: str
    """Google OAuth access token obtained by the client."""
    action: Literal["login", "signup", "register"] = "login"
    """"login" rejects unknown identities; "signup" (or "register") creates the account."""


class PostDetails(BaseModel):
    """Body of `POST /posts`."""
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Union[List[str], str]] = None
    type: Optional[str] = None
    difficulty: Optional[str] = None
    visibility: Optional[Literal["public", "private", "followers"]] = None
    attachments: Optional[List[FileRec]] = None


class PostUpdateDetails(BaseModel):
    """
    Body of `PUT /posts/:id`. Only the keys the client sends are applied.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Union[List[str], str]] = None
    type: Optional[str] = None
    difficulty: Optional[str] = None
    visibility: Optional[Literal["public", "private", "followers"]] = None
    attachments: Optional[List[FileRec]] = None
    editReason: Optional[str] = None
    """Shown in the edit history; defaults to 'Updated post'."""


class ReportDetails(BaseModel):
    reason: Optional[str] = "other"
    description: Optional[str] = ""


class ModerationDecision(BaseModel):
    status: Optional[str] = Field(None, description="'approved' or 'rejected'; anything else is refused with 400.", examples=["approved"])
    note: Optional[str] = Field(None, description="Moderator note, recorded in the post's edit history.")


class CommentDetails(BaseModel):
    text: Optional[str] = None


class AnswerDetails(BaseModel):
    content: Optional[str] = None


class VoteDetails(BaseModel):
    type: Optional[str] = None
    """'up' or 'down'; anything else only clears the caller's vote."""


class ProfileUpdate(BaseModel):
    """
    Body of `PUT /users/profile`. Unknown keys (including `email` and
    `password`) are dropped by validation.
    """
    name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = None
    website: Optional[str] = None
    company: Optional[str] = None
    jobTitle: Optional[str] = None
    socials: Optional[dict] = None
    skills: Optional[List[str]] = None


class CollectionDetails(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    isPublic: Optional[bool] = None


class CollectionPost(BaseModel):
    postId: Optional[str] = None


class RoomDetails(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    topics: Optional[List[str]] = None


class PollDetails(BaseModel):
    question: Optional[str] = None
    options: Optional[List[str]] = None
    expiresAt: Optional[datetime] = None


class PollVote(BaseModel):
    optionIndex: Optional[int] = None


class ProjectDetails(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    coverImage: Optional[str] = None
    galleryImages: Optional[List[str]] = None
    repoLink: Optional[str] = None
    demoLink: Optional[str] = None
    tags: Optional[List[str]] = None
