"""
Summary state machine.

    idle       -> processing
    processing -> ready | error
    error      -> processing   (retry)
    ready      -> processing   (fresh generation)

Any transition outside `TRANSITIONS` raises `InvalidTransition`.
"""

from typing import Dict, FrozenSet

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "idle": frozenset({"processing"}),
    "processing": frozenset({"ready", "error"}),
    "error": frozenset({"processing"}),
    "ready": frozenset({"processing"}),
}


class InvalidTransition(Exception):
    def __init__(self, current: str, target: str):
        super().__init__(f"Summary cannot go from {current!r} to {target!r}")
        self.current = current
        self.target = target


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def transition(current: str, target: str) -> str:
    """Return `target` when the move is allowed, else raise `InvalidTransition`."""
    if not can_transition(current, target):
        raise InvalidTransition(current, target)
    return target
