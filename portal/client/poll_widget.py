"""
Poll voting widget.

Vote shares are whole percentages of the total with halves rounded up, and
0 for every option while nobody has voted. The caller's current vote is the first option whose
voter list contains their id; a poll in which the caller appears under
several options is reported through `has_ambiguous_vote` and a warning.
"""

import logging
from typing import Callable, List, Optional

from portal.client.api import ApiClient, ApiError
from portal.client.helpers import percent
from portal.client.interface import UserInterface
from portal.client.models import Poll, PollOption
from portal.client.session import AuthSession

logger = logging.getLogger(__name__)


class PollWidget:
    def __init__(
        self,
        poll: Poll,
        session: AuthSession,
        api: ApiClient,
        ui: UserInterface,
        on_vote: Optional[Callable[[], None]] = None,
    ):
        self.poll = poll
        self.session = session
        self.api = api
        self.ui = ui
        self.on_vote = on_vote
        self.loading = False
        if self.has_ambiguous_vote:
            logger.warning(
                f"User {self.session.user_id} is listed under several options of poll {poll.id}: {self.voted_indexes}"
            )

    @property
    def total_votes(self) -> int:
        return sum(len(option.votes) for option in self.poll.options)

    def percentage(self, option: PollOption | int) -> int:
        if isinstance(option, int):
            option = self.poll.options[option]
        return percent(len(option.votes), self.total_votes)

    def percentages(self) -> List[int]:
        return [self.percentage(option) for option in self.poll.options]

    @property
    def voted_indexes(self) -> List[int]:
        user_id = self.session.user_id
        if not user_id:
            return []
        return [index for index, option in enumerate(self.poll.options) if user_id in option.votes]

    @property
    def user_vote_index(self) -> int:
        voted = self.voted_indexes
        return voted[0] if voted else -1

    @property
    def has_ambiguous_vote(self) -> bool:
        return len(self.voted_indexes) > 1

    def vote(self, option_index: int) -> bool:
        """Vote for an option; returns True when the server accepted the vote."""
        if not self.session.is_authenticated:
            self.ui.alert("Please login to vote")
            return False
        if self.loading:
            return False
        self.loading = True
        try:
            self.api.post(f"/community/polls/{self.poll.id}/vote", json={"optionIndex": option_index})
        except ApiError as e:
            logger.error(f"Vote on poll {self.poll.id} failed: {e.message}")
            return False
        finally:
            self.loading = False
        if self.on_vote:
            self.on_vote()
        return True
