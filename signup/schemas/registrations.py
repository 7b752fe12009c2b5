import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from signup.models.registrations import RegistrationStatus


class RegisterRequest(BaseModel):
    student_id: uuid.UUID


class RegistrationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: uuid.UUID
    student_id: uuid.UUID
    status: RegistrationStatus
    registered_at: datetime
    canceled_at: datetime | None = None


class RegistrationViewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: uuid.UUID
    student_name: str
    student_email: str
    registered_at: datetime


class RegistrationCountOut(BaseModel):
    event_id: uuid.UUID
    count: int


class RegistrationStatusOut(BaseModel):
    event_id: uuid.UUID
    student_id: uuid.UUID
    registered: bool


class StudentRegistrationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: uuid.UUID
    title: str
    starts_at: datetime
    signup_deadline: datetime | None = None
    registered_at: datetime
