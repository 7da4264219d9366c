"""Display helpers shared by the views."""

import math
from datetime import datetime, timezone
from typing import Optional

REPUTATION_RANKS = (
    (100, "Newcomer"),
    (500, "Contributor"),
    (1000, "Regular"),
    (2500, "Trusted"),
    (5000, "Expert"),
    (10000, "Master"),
)


def format_number(num: int) -> str:
    """1234 → '1.2K', 2500000 → '2.5M'."""
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(num)


def percent(part: float, whole: float) -> int:
    """`part` as a whole-number percentage of `whole`, halves rounded up (1 of 8 → 13)."""
    if not whole:
        return 0
    return math.floor(part / whole * 100 + 0.5)


def time_ago(date: datetime, now: Optional[datetime] = None) -> str:
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = int((now - date).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 2592000:
        return f"{seconds // 86400}d ago"
    if seconds < 31536000:
        return f"{seconds // 2592000}mo ago"
    return f"{seconds // 31536000}y ago"


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def reputation_rank(reputation: int) -> str:
    for ceiling, rank in REPUTATION_RANKS:
        if reputation < ceiling:
            return rank
    return "Legend"


def calculate_level(reputation: int) -> int:
    """Levels 1-5 up to 5000 points, then one level per thousand."""
    if reputation < 100:
        return 1
    if reputation < 500:
        return 2
    if reputation < 1000:
        return 3
    if reputation < 2500:
        return 4
    if reputation < 5000:
        return 5
    return reputation // 1000 + 5
