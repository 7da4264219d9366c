"""
Table of contents for long markdown posts.

Only `##` and `###` headings are listed, and only when the post has at least
`min_word_count` words.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from portal.client.helpers import percent

HEADING_RE = re.compile(r"^(#{2,3})\s+(.+)$", re.MULTILINE)


@dataclass(frozen=True)
class Heading:
    id: str
    text: str
    level: int


def heading_id(text: str) -> str:
    """Anchor id: lower-cased, punctuation dropped, whitespace runs → '-'."""
    return re.sub(r"\s+", "-", re.sub(r"[^\w\s-]", "", text.lower()))


def extract_headings(content: str, min_word_count: int = 1000) -> List[Heading]:
    if len(content.split()) < min_word_count:
        return []
    return [
        Heading(id=heading_id(match.group(2).strip()), text=match.group(2).strip(), level=len(match.group(1)))
        for match in HEADING_RE.finditer(content)
    ]


class TableOfContents:
    def __init__(self, content: str, min_word_count: int = 1000):
        self.headings = extract_headings(content, min_word_count)
        self.active_id: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.headings)

    def set_active(self, heading: str) -> None:
        self.active_id = heading

    def reading_progress(self, active_id: Optional[str] = None) -> int:
        """Percentage of headings passed, counting the active one; 0 when none is active."""
        if not self.headings:
            return 0
        active = active_id if active_id is not None else self.active_id
        index = next((i for i, h in enumerate(self.headings) if h.id == active), -1)
        return percent(index + 1, len(self.headings))
