"""Expose ORM models."""
from .call_log import CallLog, CallPriority, CallStatus, CallType
from .user import User

__all__ = [
    "CallLog",
    "CallPriority",
    "CallStatus",
    "CallType",
    "User",
]
