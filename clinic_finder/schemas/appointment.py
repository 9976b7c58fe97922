"""Appointment booking payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from clinic_finder.schemas.base import CamelModel


class AppointmentCreate(CamelModel):
    """Inbound booking request with the patient snapshot."""

    user_id: int
    clinic_id: int
    doctor_id: int
    appointment_time: datetime
    patient_name: str = Field(min_length=1)
    patient_age: int = Field(ge=0, le=150)
    patient_gender: str
    patient_phone: str
    patient_email: str
    reason: Optional[str] = None


class AppointmentUpdate(CamelModel):
    """Partial update; patient fields are overwritten as sent."""

    user_id: Optional[int] = None
    clinic_id: Optional[int] = None
    doctor_id: Optional[int] = None
    appointment_time: Optional[datetime] = None
    patient_name: Optional[str] = None
    patient_age: Optional[int] = Field(default=None, ge=0, le=150)
    patient_gender: Optional[str] = None
    patient_phone: Optional[str] = None
    patient_email: Optional[str] = None
    reason: Optional[str] = None


class AppointmentSummary(CamelModel):
    """Outbound appointment with resolved clinic, doctor and user names."""

    id: int
    user_id: int
    clinic_id: int
    doctor_id: int
    clinic_name: str
    doctor_name: str
    doctor_specialization: Optional[str] = None
    user_name: str
    appointment_time: datetime
    status: str
    patient_name: Optional[str] = None
    patient_age: Optional[int] = None
    patient_gender: Optional[str] = None
    patient_phone: Optional[str] = None
    patient_email: Optional[str] = None
    reason: Optional[str] = None
