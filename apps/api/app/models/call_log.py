"""Call log model and its closed enumerations."""
from __future__ import annotations

import enum

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UuidPrimaryKeyMixin


class CallType(str, enum.Enum):
    INTAKE = "intake"
    SCHEDULING = "scheduling"
    BILLING = "billing"
    PHARMACY = "pharmacy"
    REFERRAL = "referral"
    OTHER = "other"


class CallStatus(str, enum.Enum):
    NEW = "new"
    PENDING = "pending"
    WAITING_ON_PATIENT = "waiting_on_patient"
    ESCALATED = "escalated"
    COMPLETED = "completed"


class CallPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Store the lowercase values, not member names; membership is checked at the API boundary.
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )


class CallLog(UuidPrimaryKeyMixin, TimestampMixin, Base):
    """A single tracked patient phone interaction."""

    __tablename__ = "call_logs"
    __table_args__ = (Index("ix_call_logs_created_at", "created_at"),)

    patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(50), nullable=False)
    call_type: Mapped[CallType] = mapped_column(_enum_column(CallType, "call_type"), nullable=False)
    status: Mapped[CallStatus] = mapped_column(
        _enum_column(CallStatus, "call_status"), default=CallStatus.NEW, nullable=False, index=True
    )
    priority: Mapped[CallPriority] = mapped_column(
        _enum_column(CallPriority, "call_priority"), default=CallPriority.MEDIUM, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text)
    assigned_to: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    follow_up_needed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    follow_up_note: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
