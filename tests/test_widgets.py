import json
from datetime import datetime, timedelta, timezone

import pytest

from portal.client.helpers import calculate_level, format_number, reputation_rank, time_ago, truncate_text
from portal.client.models import Poll
from portal.client.poll_widget import PollWidget
from portal.client.sidebar import Sidebar
from portal.client.state import InvalidTransition, can_transition, transition
from portal.client.toc import TableOfContents, extract_headings, heading_id


def _poll(*votes) -> Poll:
    return Poll.model_validate(
        {"_id": "poll1", "question": "Tabs or spaces?", "options": [{"text": f"O{i}", "votes": v} for i, v in enumerate(votes)]}
    )


def test_percentages_with_no_votes(session, ui, api_for):
    widget = PollWidget(_poll([], []), session, api_for(session), ui)

    assert widget.total_votes == 0
    assert widget.percentages() == [0, 0]
    assert widget.user_vote_index == -1


def test_percentages_round(session, ui, api_for):
    widget = PollWidget(_poll(["x"], []), session, api_for(session), ui)
    assert widget.percentages() == [100, 0]

    thirds = PollWidget(_poll(["a"], ["b"], ["c"]), session, api_for(session), ui)
    assert thirds.percentages() == [33, 33, 33]


def test_percentages_round_halves_up(session, ui, api_for):
    eighths = PollWidget(_poll(["a"], ["b", "c", "d", "e", "f"], ["g", "h"]), session, api_for(session), ui)

    assert eighths.percentages() == [13, 63, 25]


def test_ambiguous_vote_is_reported(session, ui, api_for, caplog):
    widget = PollWidget(_poll(["reader"], ["reader", "x"]), session, api_for(session), ui)

    assert widget.has_ambiguous_vote
    assert widget.user_vote_index == 0
    assert "several options" in caplog.text


def test_vote_requires_login(fake_server, anonymous, ui, api_for):
    widget = PollWidget(_poll([], []), anonymous, api_for(anonymous), ui)

    assert widget.vote(0) is False
    assert ui.alerts == ["Please login to vote"]
    assert fake_server.requests == []


def test_vote_posts_index_and_refreshes(fake_server, session, ui, api_for):
    refreshed = []
    fake_server.on("POST", "/community/polls/poll1/vote", {"_id": "poll1"})
    widget = PollWidget(_poll([], []), session, api_for(session), ui, on_vote=lambda: refreshed.append(True))

    assert widget.vote(1) is True
    assert json.loads(fake_server.requests[0].content) == {"optionIndex": 1}
    assert refreshed == [True]
    assert widget.loading is False


def test_summary_transitions():
    assert transition("idle", "processing") == "processing"
    assert can_transition("processing", "ready")
    assert can_transition("error", "processing")
    assert not can_transition("idle", "ready")
    with pytest.raises(InvalidTransition):
        transition("processing", "idle")


def test_table_of_contents_needs_long_posts():
    short = "## Intro\nA few words."
    long = "## Setup & Install\n" + "word " * 600 + "\n### Running it\n" + "word " * 600

    assert extract_headings(short) == []
    toc = TableOfContents(long)
    assert [(h.id, h.level) for h in toc.headings] == [("setup-install", 2), ("running-it", 3)]
    assert toc.reading_progress() == 0
    toc.set_active("running-it")
    assert toc.reading_progress() == 100
    assert heading_id("What's New?") == "whats-new"


def test_reading_progress_rounds_halves_up():
    content = "\n".join(f"## Step {i}\n" + "word " * 200 for i in range(8))
    toc = TableOfContents(content)

    assert len(toc.headings) == 8
    assert toc.reading_progress("step-0") == 13
    assert toc.reading_progress("step-4") == 63


def test_sidebar_highlights_current_path():
    entries = dict((item.label, active) for item, active in Sidebar("/questions").entries())

    assert entries["Questions"] is True
    assert entries["Home"] is False
    assert Sidebar("/").is_active("/")


def test_display_helpers():
    now = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)

    assert format_number(999) == "999"
    assert format_number(1234) == "1.2K"
    assert format_number(2_500_000) == "2.5M"
    assert time_ago(now - timedelta(seconds=30), now) == "just now"
    assert time_ago(now - timedelta(hours=3), now) == "3h ago"
    assert time_ago(now - timedelta(days=40), now) == "1mo ago"
    assert truncate_text("abcdef", 3) == "abc..."
    assert truncate_text("abc", 3) == "abc"
    assert reputation_rank(50) == "Newcomer"
    assert reputation_rank(20000) == "Legend"
    assert calculate_level(0) == 1
    assert calculate_level(7000) == 12
