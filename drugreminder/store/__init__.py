# drugreminder/store/__init__.py

from .base import (
    AdherenceLog,
    NotificationPermissionError,
    NotificationSink,
    RoutingIdentity,
    ScheduleStore,
    StoreUnavailableError,
)

__all__ = [
    "AdherenceLog",
    "NotificationPermissionError",
    "NotificationSink",
    "RoutingIdentity",
    "ScheduleStore",
    "StoreUnavailableError"
]
