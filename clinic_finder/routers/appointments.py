"""Appointment booking router."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from clinic_finder.schemas.appointment import (
    AppointmentCreate,
    AppointmentSummary,
    AppointmentUpdate,
)
from clinic_finder.services.db import get_db
from clinic_finder.services.scheduler import AppointmentScheduler

router = APIRouter()


def get_scheduler(db: Session = Depends(get_db)) -> AppointmentScheduler:
    return AppointmentScheduler(db)


@router.post("", response_model=AppointmentSummary, status_code=status.HTTP_201_CREATED)
def book_appointment(
    payload: AppointmentCreate,
    scheduler: AppointmentScheduler = Depends(get_scheduler),
) -> AppointmentSummary:
    """Book a doctor at one instant; the slot must be free and in the future."""

    appointment = scheduler.book(payload)
    return scheduler.summarize(appointment)


@router.put("/{appointment_id}", response_model=AppointmentSummary)
def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    scheduler: AppointmentScheduler = Depends(get_scheduler),
) -> AppointmentSummary:
    appointment = scheduler.update(appointment_id, payload)
    return scheduler.summarize(appointment)


@router.post("/{appointment_id}/cancel", response_model=AppointmentSummary)
def cancel_appointment(
    appointment_id: int,
    scheduler: AppointmentScheduler = Depends(get_scheduler),
) -> AppointmentSummary:
    appointment = scheduler.cancel(appointment_id)
    return scheduler.summarize(appointment)


@router.delete("/{appointment_id}")
def delete_appointment(
    appointment_id: int,
    scheduler: AppointmentScheduler = Depends(get_scheduler),
) -> dict[str, str]:
    scheduler.delete(appointment_id)
    return {"message": "Appointment deleted successfully"}


@router.get("/user/{user_id}", response_model=List[AppointmentSummary])
def list_user_appointments(
    user_id: int,
    scheduler: AppointmentScheduler = Depends(get_scheduler),
) -> List[AppointmentSummary]:
    return scheduler.list_by_user(user_id)


@router.get("/clinic/{clinic_id}", response_model=List[AppointmentSummary])
def list_clinic_appointments(
    clinic_id: int,
    scheduler: AppointmentScheduler = Depends(get_scheduler),
) -> List[AppointmentSummary]:
    return scheduler.list_by_clinic(clinic_id)
