# drugreminder/models/__init__.py

from .user import User, UserRole, CaregiverLink
from .medication import Medication
from .adherence_event import AdherenceEvent
from .notification import Notification, NotificationStatus

__all__ = [
    "User",
    "UserRole",
    "CaregiverLink",
    "Medication",
    "AdherenceEvent",
    "Notification",
    "NotificationStatus"
]
