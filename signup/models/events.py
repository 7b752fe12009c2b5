import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from signup.database.db import Base
from signup.database.types import UTCDateTime


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="ck_events_capacity_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    # None means unlimited seats
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    signup_deadline: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    starts_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    registrations: Mapped[list["Registration"]] = relationship(back_populates="event")
