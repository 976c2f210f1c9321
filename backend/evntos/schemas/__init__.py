from evntos.schemas.user import UserCreate, UserResponse, UserLogin, Token
from evntos.schemas.event import (
    EventCreate, EventUpdate, EventResponse, PublicEventResponse,
    EventSummary, EventListResponse, EventDeleteResponse,
)
from evntos.schemas.registration import (
    RegistrationCreate, RegistrationResponse, RegistrationCreatedResponse,
    EmailResult, VisitRecordedResponse, ScanRequest, ScanResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token",
    "EventCreate", "EventUpdate", "EventResponse", "PublicEventResponse",
    "EventSummary", "EventListResponse", "EventDeleteResponse",
    "RegistrationCreate", "RegistrationResponse", "RegistrationCreatedResponse",
    "EmailResult", "VisitRecordedResponse", "ScanRequest", "ScanResponse",
]
