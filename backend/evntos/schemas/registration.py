"""
Pydantic schemas for registrations, ticket email results and scan outcomes.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field


class RegistrationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    contact_number: Optional[str] = Field(None, max_length=50)


class RegistrationResponse(BaseModel):
    id: str
    event_id: str
    name: str
    email: str
    contact_number: Optional[str]
    registered_at: datetime
    source: str
    checked_in: bool
    checked_in_at: Optional[datetime]

    model_config = {"from_attributes": True}


class EmailResult(BaseModel):
    success: bool
    message: str
    email_id: Optional[str] = None


class RegistrationCreatedResponse(BaseModel):
    registration: RegistrationResponse
    ticket_email: EmailResult


class VisitRecordedResponse(BaseModel):
    event_id: str
    registration_id: str


class ScanRequest(BaseModel):
    code: str


class ScanResponse(BaseModel):
    status: Literal["success", "error", "not_found"]
    message: str
    registration: Optional[RegistrationResponse] = None
    already_checked_in: bool = False
