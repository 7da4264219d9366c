"""Column defaults shared by the ORM entities."""

from datetime import datetime, timezone
import uuid


def new_id() -> str:
    """Return a fresh UUID4 as a string primary key."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """
    Attach UTC to naive datetimes.

    SQLite drops tzinfo on round trip, so every timestamp read back from the
    database goes through here before being compared or serialized.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
