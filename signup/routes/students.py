import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from signup.database.db import get_db
from signup.schemas.events import ErrorOut
from signup.schemas.registrations import StudentRegistrationOut
from signup.services.registrations import list_student_registrations

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.get(
    "/{student_id}/registrations",
    response_model=list[StudentRegistrationOut],
    responses={503: {"model": ErrorOut}},
)
def student_registrations(student_id: uuid.UUID, db: Session = Depends(get_db)):
    return list_student_registrations(db, student_id)
