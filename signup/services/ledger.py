import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import exists, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from signup.core.errors import ConflictError, NotFoundError, PreconditionError
from signup.models.events import Event
from signup.models.registrations import Registration, RegistrationStatus
from signup.models.users import User


@dataclass(frozen=True)
class RegistrationView:
    event_id: uuid.UUID
    student_id: uuid.UUID
    student_name: str
    student_email: str
    registered_at: datetime


@dataclass(frozen=True)
class StudentRegistrationView:
    event_id: uuid.UUID
    title: str
    starts_at: datetime
    signup_deadline: datetime | None
    registered_at: datetime


# SQLSTATE codes (psycopg exposes .sqlstate, psycopg2 .pgcode)
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def _sqlstate(error: IntegrityError) -> str | None:
    return getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)


def _is_unique_violation(error: IntegrityError) -> bool:
    code = _sqlstate(error)
    if code is not None:
        return code == UNIQUE_VIOLATION
    # sqlite3: "UNIQUE constraint failed: registrations.event_id, ..."
    return "UNIQUE" in str(error.orig).upper()


def _is_foreign_key_violation(error: IntegrityError) -> bool:
    code = _sqlstate(error)
    if code is not None:
        return code == FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY" in str(error.orig).upper()


def _pair(event_id: uuid.UUID, student_id: uuid.UUID):
    return (Registration.event_id == event_id, Registration.student_id == student_id)


def find(db: Session, event_id: uuid.UUID, student_id: uuid.UUID) -> Registration | None:
    """Return the row for the pair whatever its status."""
    return db.scalars(select(Registration).where(*_pair(event_id, student_id))).one_or_none()


def count_active(db: Session, event_id: uuid.UUID) -> int:
    count = db.scalar(
        select(func.count(Registration.id)).where(
            Registration.event_id == event_id,
            Registration.status == RegistrationStatus.REGISTERED,
        )
    )
    return int(count or 0)


def is_registered(db: Session, event_id: uuid.UUID, student_id: uuid.UUID) -> bool:
    return bool(
        db.scalar(
            select(
                exists().where(
                    *_pair(event_id, student_id),
                    Registration.status == RegistrationStatus.REGISTERED,
                )
            )
        )
    )


def register(
    db: Session,
    *,
    event_id: uuid.UUID,
    student_id: uuid.UUID,
    capacity: int | None,
    now: datetime,
) -> Registration:
    """
    Allocate a seat for the student, or return the seat they already hold.

    The caller must hold the event row lock: the active count read here and the
    write that follows are only atomic because every other registration for the
    event is queued behind that lock.
    """
    registration = find(db, event_id, student_id)
    if registration is not None and registration.status is RegistrationStatus.REGISTERED:
        return registration

    if capacity is not None and count_active(db, event_id) >= capacity:
        raise PreconditionError("no seats")

    if registration is None:
        registration = Registration(
            event_id=event_id,
            student_id=student_id,
            status=RegistrationStatus.REGISTERED,
            registered_at=now,
        )
        db.add(registration)
    else:
        # reactivate the canceled row instead of adding a second one
        registration.status = RegistrationStatus.REGISTERED
        registration.registered_at = now
        registration.canceled_at = None

    try:
        db.flush()
    except IntegrityError as e:
        if _is_unique_violation(e):
            raise ConflictError("registration already exists") from e
        if _is_foreign_key_violation(e):
            raise NotFoundError("student not found") from e
        raise
    return registration


def cancel(db: Session, *, event_id: uuid.UUID, student_id: uuid.UUID, now: datetime) -> Registration:
    res = db.execute(
        update(Registration)
        .where(*_pair(event_id, student_id))
        .where(Registration.status == RegistrationStatus.REGISTERED)
        .values(status=RegistrationStatus.CANCELED, canceled_at=now)
    )
    if res.rowcount != 1:  # type: ignore
        raise NotFoundError("registration not found")

    return db.scalars(
        select(Registration)
        .where(*_pair(event_id, student_id))
        .execution_options(populate_existing=True)
    ).one()


def list_active(db: Session, event_id: uuid.UUID) -> list[RegistrationView]:
    """Active registrations for the event, newest first, with student name and email."""
    rows = db.execute(
        select(
            Registration.event_id,
            Registration.student_id,
            User.name,
            User.email,
            Registration.registered_at,
        )
        .select_from(Registration)
        .join(Registration.student)
        .where(
            Registration.event_id == event_id,
            Registration.status == RegistrationStatus.REGISTERED,
        )
        .order_by(Registration.registered_at.desc(), Registration.id.desc())
    ).all()

    return [
        RegistrationView(
            event_id=row.event_id,
            student_id=row.student_id,
            student_name=row.name,
            student_email=row.email,
            registered_at=row.registered_at,
        )
        for row in rows
    ]


def list_for_student(db: Session, student_id: uuid.UUID) -> list[StudentRegistrationView]:
    """Events the student holds an active seat in, latest start first."""
    rows = db.execute(
        select(
            Event.id,
            Event.title,
            Event.starts_at,
            Event.signup_deadline,
            Registration.registered_at,
        )
        .select_from(Registration)
        .join(Registration.event)
        .where(
            Registration.student_id == student_id,
            Registration.status == RegistrationStatus.REGISTERED,
        )
        .order_by(Event.starts_at.desc(), Event.id)
    ).all()

    return [
        StudentRegistrationView(
            event_id=row.id,
            title=row.title,
            starts_at=row.starts_at,
            signup_deadline=row.signup_deadline,
            registered_at=row.registered_at,
        )
        for row in rows
    ]
