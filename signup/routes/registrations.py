import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from signup.database.db import get_db
from signup.schemas.events import ErrorOut
from signup.schemas.registrations import (
    RegisterRequest,
    RegistrationCountOut,
    RegistrationOut,
    RegistrationStatusOut,
    RegistrationViewOut,
)
from signup.services.registrations import (
    cancel_registration,
    count_registrations,
    is_student_registered,
    list_registrations,
    register_student,
)

router = APIRouter(prefix="/api/v1/events", tags=["registrations"])

ERROR_RESPONSES = {
    404: {"model": ErrorOut},
    409: {"model": ErrorOut},
    503: {"model": ErrorOut},
}


@router.post("/{event_id}/register", response_model=RegistrationOut, responses=ERROR_RESPONSES)
def register(event_id: uuid.UUID, payload: RegisterRequest, db: Session = Depends(get_db)):
    return register_student(db, event_id=event_id, student_id=payload.student_id)


@router.post(
    "/{event_id}/cancel",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=ERROR_RESPONSES,
)
def cancel(event_id: uuid.UUID, payload: RegisterRequest, db: Session = Depends(get_db)):
    cancel_registration(db, event_id=event_id, student_id=payload.student_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/registrations", response_model=list[RegistrationViewOut])
def registrations(event_id: uuid.UUID, db: Session = Depends(get_db)):
    return list_registrations(db, event_id)


@router.get("/{event_id}/registrations/count", response_model=RegistrationCountOut)
def registrations_count(event_id: uuid.UUID, db: Session = Depends(get_db)):
    return {"event_id": event_id, "count": count_registrations(db, event_id)}


@router.get("/{event_id}/registrations/{student_id}", response_model=RegistrationStatusOut)
def registration_status(event_id: uuid.UUID, student_id: uuid.UUID, db: Session = Depends(get_db)):
    return {
        "event_id": event_id,
        "student_id": student_id,
        "registered": is_student_registered(db, event_id, student_id),
    }
