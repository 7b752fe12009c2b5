import enum
import uuid
from datetime import datetime

from sqlalchemy import Enum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from signup.database.db import Base
from signup.database.types import UTCDateTime
from signup.models.events import Event
from signup.models.users import User


class RegistrationStatus(str, enum.Enum):
    REGISTERED = "registered"
    CANCELED = "canceled"


class Registration(Base):
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "student_id", name="uq_registrations_event_student"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    event_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("events.id"), nullable=False, index=True)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    status: Mapped[RegistrationStatus] = mapped_column(
        Enum(
            RegistrationStatus,
            name="registration_status",
            native_enum=False,
            validate_strings=True,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=RegistrationStatus.REGISTERED,
    )
    registered_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    canceled_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    event: Mapped[Event] = relationship(back_populates="registrations")
    student: Mapped[User] = relationship()
