from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from datetime import datetime
from bson import ObjectId

class BookingCreate(BaseModel):
    """Booking creation data. A booking reserves a tutor for a user on a date."""
    model_config = ConfigDict(extra="allow")

    tutorId: str
    userEmail: EmailStr
    date: datetime

    @field_validator('tutorId')
    def validate_tutor_id(cls, v):
        if not ObjectId.is_valid(v):
            raise ValueError('tutorId must be a 24 character hex identifier')
        return v
