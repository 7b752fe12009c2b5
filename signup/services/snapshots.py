import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from signup.core.errors import NotFoundError
from signup.models.events import Event


@dataclass(frozen=True)
class EventSnapshot:
    event_id: uuid.UUID
    title: str
    capacity: int | None
    signup_deadline: datetime | None
    starts_at: datetime
    is_published: bool


def _snapshot_stmt(event_id: uuid.UUID):
    return select(
        Event.id,
        Event.title,
        Event.capacity,
        Event.signup_deadline,
        Event.starts_at,
        Event.is_published,
    ).where(Event.id == event_id)


def _to_snapshot(row) -> EventSnapshot:
    return EventSnapshot(
        event_id=row.id,
        title=row.title,
        capacity=row.capacity,
        signup_deadline=row.signup_deadline,
        starts_at=row.starts_at,
        is_published=row.is_published,
    )


def locked_snapshot(db: Session, event_id: uuid.UUID) -> EventSnapshot:
    """
    Read the event under an exclusive row lock held until the caller's
    transaction ends. Concurrent registrations for the same event queue here.
    """
    row = db.execute(_snapshot_stmt(event_id).with_for_update()).one_or_none()
    if row is None:
        raise NotFoundError("event not found")
    return _to_snapshot(row)


def get_snapshot(db: Session, event_id: uuid.UUID) -> EventSnapshot:
    """Plain read for display. Must not be used to decide a registration."""
    row = db.execute(_snapshot_stmt(event_id)).one_or_none()
    if row is None:
        raise NotFoundError("event not found")
    return _to_snapshot(row)
