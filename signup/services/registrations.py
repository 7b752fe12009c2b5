import uuid
from datetime import datetime, timezone
from typing import Callable, TypeVar

import structlog
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from signup.core.errors import ConflictError, RegistrationError, StorageError
from signup.models.registrations import Registration, RegistrationStatus
from signup.services import ledger
from signup.services.eligibility import check_eligibility, seats_left
from signup.services.ledger import RegistrationView, StudentRegistrationView
from signup.services.snapshots import get_snapshot, locked_snapshot

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _run_in_transaction(db: Session, work: Callable[[], T]) -> T:
    """Run ``work`` in one transaction and end it, committing on success."""
    try:
        # Check if we're already in a transaction (autobegun by an earlier read)
        if db.in_transaction():
            try:
                result = work()
            except Exception:
                db.rollback()
                raise
            db.commit()
            return result
        with db.begin():
            return work()
    except DBAPIError as e:
        raise StorageError("storage unavailable") from e


def register_student(
    db: Session,
    *,
    event_id: uuid.UUID,
    student_id: uuid.UUID,
    now: datetime | None = None,
) -> Registration:
    """
    Register a student for an event, holding the event row lock for the whole
    transaction so that no two registrations can both see a free last seat.

    Registering twice returns the existing registration.
    """
    now = now or _utcnow()
    log = logger.bind(event_id=str(event_id), student_id=str(student_id))

    def work() -> Registration:
        snapshot = locked_snapshot(db, event_id)
        check_eligibility(snapshot, now)
        return ledger.register(
            db,
            event_id=event_id,
            student_id=student_id,
            capacity=snapshot.capacity,
            now=now,
        )

    try:
        registration = _run_in_transaction(db, work)
    except ConflictError:
        # storage saw a duplicate pair: answer like an already-active registration
        existing = _run_in_transaction(db, lambda: ledger.find(db, event_id, student_id))
        if existing is not None and existing.status is RegistrationStatus.REGISTERED:
            log.info("registration_conflict_resolved")
            return existing
        log.warning("registration_conflict")
        raise
    except StorageError:
        log.exception("registration_storage_error")
        raise
    except RegistrationError as e:
        log.info("registration_rejected", reason=e.message, error=e.code)
        raise

    log.info("registration_active", registered_at=registration.registered_at.isoformat())
    return registration


def cancel_registration(
    db: Session,
    *,
    event_id: uuid.UUID,
    student_id: uuid.UUID,
    now: datetime | None = None,
) -> Registration:
    """Release the student's seat. Takes no event lock; freeing a seat cannot overfill."""
    now = now or _utcnow()
    log = logger.bind(event_id=str(event_id), student_id=str(student_id))

    try:
        registration = _run_in_transaction(
            db,
            lambda: ledger.cancel(db, event_id=event_id, student_id=student_id, now=now),
        )
    except StorageError:
        log.exception("cancellation_storage_error")
        raise
    except RegistrationError as e:
        log.info("cancellation_rejected", reason=e.message, error=e.code)
        raise

    log.info("registration_canceled")
    return registration


def list_registrations(db: Session, event_id: uuid.UUID) -> list[RegistrationView]:
    return _run_in_transaction(db, lambda: ledger.list_active(db, event_id))


def list_student_registrations(db: Session, student_id: uuid.UUID) -> list[StudentRegistrationView]:
    return _run_in_transaction(db, lambda: ledger.list_for_student(db, student_id))


def count_registrations(db: Session, event_id: uuid.UUID) -> int:
    return _run_in_transaction(db, lambda: ledger.count_active(db, event_id))


def is_student_registered(db: Session, event_id: uuid.UUID, student_id: uuid.UUID) -> bool:
    return _run_in_transaction(db, lambda: ledger.is_registered(db, event_id, student_id))


def get_event_stats(db: Session, event_id: uuid.UUID) -> dict:
    """Seat usage for display. The numbers may be stale by the time they are shown."""

    def work() -> dict:
        snapshot = get_snapshot(db, event_id)
        active_count = ledger.count_active(db, event_id)
        return {
            "event_id": snapshot.event_id,
            "title": snapshot.title,
            "capacity": snapshot.capacity,
            "active_count": active_count,
            "seats_left": seats_left(snapshot.capacity, active_count),
            "is_published": snapshot.is_published,
            "signup_deadline": snapshot.signup_deadline,
            "starts_at": snapshot.starts_at,
        }

    return _run_in_transaction(db, work)
