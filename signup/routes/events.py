import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from signup.database.db import get_db
from signup.schemas.events import ErrorOut, EventStatsOut
from signup.services.registrations import get_event_stats

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.get("/{event_id}/stats", response_model=EventStatsOut, responses={404: {"model": ErrorOut}})
def event_stats(event_id: uuid.UUID, db: Session = Depends(get_db)):
    return get_event_stats(db, event_id)
