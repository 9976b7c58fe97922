"""Appointment model definition."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from clinic_finder.models.base import Base


class AppointmentStatus(str, enum.Enum):
    """Lifecycle states of an appointment."""

    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"


class Appointment(Base):
    """Represents a booking of one doctor at one instant."""

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    clinic_id: Mapped[int] = mapped_column(
        ForeignKey("clinics.id"),
        nullable=False,
        index=True,
    )
    doctor_id: Mapped[int] = mapped_column(
        ForeignKey("doctors.id"),
        nullable=False,
    )
    appointment_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        default=AppointmentStatus.BOOKED.value,
        nullable=False,
    )

    # Snapshot taken at booking time, independent of the user's profile.
    patient_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    patient_age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    patient_gender: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    patient_phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    patient_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index(
            "uq_appointments_doctor_slot_booked",
            "doctor_id",
            "appointment_time",
            unique=True,
            postgresql_where=text("status = 'BOOKED'"),
            sqlite_where=text("status = 'BOOKED'"),
        ),
    )
