from evntos.models.user import User
from evntos.models.event import Event
from evntos.models.registration import Registration

__all__ = ["User", "Event", "Registration"]
