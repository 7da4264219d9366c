from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class NavItem:
    label: str
    href: str
    section: str
    active_path: str


NAV_ITEMS: Tuple[NavItem, ...] = (
    NavItem("Home", "/", "", "/"),
    NavItem("Questions", "/", "Public", "/questions"),
    NavItem("Tags", "/tags", "Public", "/tags"),
    NavItem("Users", "/users", "Public", "/users"),
    NavItem("Bookmarks", "/bookmarks", "Collectives", "/bookmarks"),
)


class Sidebar:
    """Left navigation; an entry is highlighted when the location equals its path."""

    def __init__(self, location: str = "/"):
        self.location = location

    def is_active(self, path: str) -> bool:
        return self.location == path

    def entries(self) -> List[Tuple[NavItem, bool]]:
        return [(item, self.is_active(item.active_path)) for item in NAV_ITEMS]
