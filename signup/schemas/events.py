import uuid
from datetime import datetime

from pydantic import BaseModel


class EventStatsOut(BaseModel):
    event_id: uuid.UUID
    title: str
    capacity: int | None
    active_count: int
    seats_left: int | None
    is_published: bool
    signup_deadline: datetime | None
    starts_at: datetime


class ErrorOut(BaseModel):
    detail: str
    error: str
