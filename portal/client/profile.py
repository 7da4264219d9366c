"""
Profile editor.

The signed-in user is only ever changed through this round trip: an optional
avatar upload (`POST /users/avatar`, multipart field `avatar`) followed by
`PUT /users/profile`. The user record the server answers with is stored back
into the session with the current token, so durable storage stays in step.
"""

import logging
from typing import Dict, Optional, Tuple

from pydantic import ValidationError

from portal.client.api import ApiClient, ApiError
from portal.client.interface import UserInterface
from portal.client.models import User
from portal.client.session import AuthSession

logger = logging.getLogger(__name__)

SOCIAL_NETWORKS = ("github", "linkedin", "leetcode", "stackoverflow", "medium", "twitter")
OPTIONAL_FIELDS = ("website", "company")


def form_from_user(user: Optional[User]) -> Dict[str, str]:
    """Flat form values for `user`; skills are joined with ', ' and each social link is its own field."""
    form = {"name": "", "username": "", "jobTitle": "", "company": "", "bio": "", "location": "", "website": "", "skills": ""}
    form.update({network: "" for network in SOCIAL_NETWORKS})
    if user is None:
        return form
    form.update(
        {
            "name": user.name or "",
            "username": user.username or "",
            "jobTitle": user.job_title or "",
            "company": user.company or "",
            "bio": user.bio or "",
            "location": user.location or "",
            "website": user.website or "",
            "skills": ", ".join(user.skills),
        }
    )
    form.update({network: user.socials.get(network) or "" for network in SOCIAL_NETWORKS})
    return form


def build_updates(form: Dict[str, str]) -> dict:
    """
    Turn form values into the `PUT /users/profile` body.

    Skills are split on commas, social links are grouped under `socials`, and
    an empty website or company is left out so the stored value is kept.
    """
    updates = {key: value for key, value in form.items() if key not in SOCIAL_NETWORKS}
    updates["skills"] = [skill.strip() for skill in form.get("skills", "").split(",") if skill.strip()]
    updates["socials"] = {network: form.get(network, "") for network in SOCIAL_NETWORKS}
    for key in OPTIONAL_FIELDS:
        if not updates.get(key):
            updates.pop(key, None)
    return updates


class ProfileEditor:
    def __init__(self, session: AuthSession, api: ApiClient, ui: UserInterface):
        self.session = session
        self.api = api
        self.ui = ui
        self.form = form_from_user(session.user)
        self.avatar_file: Optional[Tuple[str, bytes, str]] = None
        self.saving = False

    def choose_avatar(self, filename: str, content: bytes, content_type: str = "image/png") -> None:
        self.avatar_file = (filename, content, content_type)

    def save(self) -> Optional[User]:
        """
        Upload the chosen avatar (if any), then send the profile form.

        Returns
        -------
        User | None
            The updated user, or None when nothing was saved. On success the
            session is refreshed and the view moves to the public profile.
        """
        if not self.session.is_authenticated:
            self.ui.navigate("/login")
            return None
        if self.saving:
            return None
        self.saving = True
        try:
            if self.avatar_file:
                filename, content, content_type = self.avatar_file
                self.api.upload("/users/avatar", "avatar", filename, content, content_type)
            data = self.api.put("/users/profile", json=build_updates(self.form))
            user = User.model_validate(data["user"])
        except (ApiError, ValidationError, KeyError, TypeError) as e:
            logger.error(f"Failed to update profile: {e}")
            self.ui.alert("Failed to update profile")
            return None
        finally:
            self.saving = False

        self.session.login(self.session.token, user)
        self.avatar_file = None
        self.form = form_from_user(user)
        self.ui.alert("Profile updated successfully!")
        self.ui.navigate(f"/users/{user.id}")
        return user
