"""Appointment booking with slot conflict detection."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clinic_finder.models.appointment import Appointment, AppointmentStatus
from clinic_finder.models.clinic import Clinic
from clinic_finder.models.doctor import Doctor
from clinic_finder.models.user import User
from clinic_finder.schemas.appointment import (
    AppointmentCreate,
    AppointmentSummary,
    AppointmentUpdate,
)
from clinic_finder.services.catalog import ClinicCatalog
from clinic_finder.services.db import transaction
from clinic_finder.services.errors import (
    InvalidTransitionError,
    NotFoundError,
    PastTimeError,
    ReferenceNotFoundError,
    SlotTakenError,
)

LOGGER = logging.getLogger(__name__)

SLOT_INDEX_NAME = "uq_appointments_doctor_slot_booked"
# SQLite reports a column index violation by its columns, not its name.
SLOT_INDEX_COLUMNS = "appointments.doctor_id, appointments.appointment_time"

PATIENT_FIELDS = (
    "patient_name",
    "patient_age",
    "patient_gender",
    "patient_phone",
    "patient_email",
    "reason",
)


def to_local_naive(instant: datetime) -> datetime:
    """Express an instant as naive local time, the timeline appointments use."""

    if instant.tzinfo is None:
        return instant
    return instant.astimezone().replace(tzinfo=None)


class AppointmentScheduler:
    """Books, reschedules, cancels and deletes appointments.

    A slot is a (doctor, instant) pair and holds at most one BOOKED
    appointment. The partial unique index on the appointments table is the
    real guard; the query made before writing only gives an early answer.
    """

    def __init__(
        self,
        db: Session,
        *,
        catalog: Optional[ClinicCatalog] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.db = db
        self.catalog = catalog or ClinicCatalog(db)
        self._clock = clock

    # ---------------------------------------------------------------------
    # Commands
    # ---------------------------------------------------------------------
    def book(self, request: AppointmentCreate) -> Appointment:
        instant = to_local_naive(request.appointment_time)

        try:
            with transaction(self.db):
                self._resolve_user(request.user_id)
                self._resolve_clinic(request.clinic_id)
                self._resolve_doctor(request.doctor_id)
                self._ensure_not_past(instant)
                self._ensure_slot_free(request.doctor_id, instant)

                appointment = Appointment(
                    user_id=request.user_id,
                    clinic_id=request.clinic_id,
                    doctor_id=request.doctor_id,
                    appointment_time=instant,
                    status=AppointmentStatus.BOOKED.value,
                    **{field: getattr(request, field) for field in PATIENT_FIELDS},
                )
                self.db.add(appointment)
                self.db.flush()
        except IntegrityError as exc:
            self._raise_if_slot_violation(exc, request.doctor_id, instant)
            raise

        LOGGER.info(
            "Booked appointment id=%s doctor=%s time=%s",
            appointment.id,
            appointment.doctor_id,
            instant,
        )
        return appointment

    def update(self, appointment_id: int, request: AppointmentUpdate) -> Appointment:
        """Apply a partial update, re-validating the slot when it moves."""

        instant = (
            to_local_naive(request.appointment_time)
            if request.appointment_time is not None
            else None
        )
        doctor_id = request.doctor_id
        target_time = instant

        try:
            with transaction(self.db):
                appointment = self._get_appointment(appointment_id)

                if instant is not None:
                    self._ensure_not_past(instant)

                if request.doctor_id is not None:
                    self._resolve_doctor(request.doctor_id)
                if request.clinic_id is not None:
                    self._resolve_clinic(request.clinic_id)
                if request.user_id is not None:
                    self._resolve_user(request.user_id)

                if doctor_id is None:
                    doctor_id = appointment.doctor_id
                if target_time is None:
                    target_time = appointment.appointment_time
                slot_moves = instant is not None or request.doctor_id is not None
                if slot_moves and appointment.status == AppointmentStatus.BOOKED.value:
                    self._ensure_slot_free(doctor_id, target_time, exclude_id=appointment.id)

                appointment.doctor_id = doctor_id
                appointment.appointment_time = target_time
                if request.clinic_id is not None:
                    appointment.clinic_id = request.clinic_id
                if request.user_id is not None:
                    appointment.user_id = request.user_id
                for field in PATIENT_FIELDS:
                    setattr(appointment, field, getattr(request, field))

                self.db.flush()
        except IntegrityError as exc:
            self._raise_if_slot_violation(exc, doctor_id, target_time)
            raise

        LOGGER.info("Updated appointment id=%s", appointment_id)
        return appointment

    def cancel(self, appointment_id: int) -> Appointment:
        """Move a BOOKED appointment to CANCELLED, freeing its slot."""

        with transaction(self.db):
            appointment = self._get_appointment(appointment_id)
            if appointment.status != AppointmentStatus.BOOKED.value:
                raise InvalidTransitionError()
            appointment.status = AppointmentStatus.CANCELLED.value
            self.db.flush()

        LOGGER.info("Cancelled appointment id=%s", appointment_id)
        return appointment

    def delete(self, appointment_id: int) -> None:
        with transaction(self.db):
            appointment = self._get_appointment(appointment_id)
            self.db.delete(appointment)
            self.db.flush()

        LOGGER.info("Deleted appointment id=%s", appointment_id)

    # ---------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------
    def list_by_user(self, user_id: int) -> List[AppointmentSummary]:
        if self.catalog.get_user(user_id) is None:
            LOGGER.info("Listing appointments for unknown user id=%s", user_id)
            return []
        return self._summaries(_summary_query().where(Appointment.user_id == user_id))

    def list_by_clinic(self, clinic_id: int) -> List[AppointmentSummary]:
        if self.catalog.get_clinic(clinic_id) is None:
            LOGGER.info("Listing appointments for unknown clinic id=%s", clinic_id)
            return []
        return self._summaries(_summary_query().where(Appointment.clinic_id == clinic_id))

    def summarize(self, appointment: Appointment) -> AppointmentSummary:
        summaries = self._summaries(_summary_query().where(Appointment.id == appointment.id))
        if not summaries:
            raise NotFoundError("Appointment", appointment.id)
        return summaries[0]

    def is_slot_taken(
        self,
        doctor_id: int,
        instant: datetime,
        exclude_id: Optional[int] = None,
    ) -> bool:
        query = select(Appointment.id).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time == instant,
            Appointment.status == AppointmentStatus.BOOKED.value,
        )
        if exclude_id is not None:
            query = query.where(Appointment.id != exclude_id)
        return self.db.scalar(query.limit(1)) is not None

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    def _get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.db.get(Appointment, appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    def _resolve_user(self, user_id: int) -> User:
        user = self.catalog.get_user(user_id)
        if user is None:
            raise ReferenceNotFoundError("User", user_id)
        return user

    def _resolve_clinic(self, clinic_id: int) -> Clinic:
        clinic = self.catalog.get_clinic(clinic_id)
        if clinic is None:
            raise ReferenceNotFoundError("Clinic", clinic_id)
        return clinic

    def _resolve_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.catalog.get_doctor(doctor_id)
        if doctor is None:
            raise ReferenceNotFoundError("Doctor", doctor_id)
        return doctor

    def _ensure_not_past(self, instant: datetime) -> None:
        if instant < self._clock():
            raise PastTimeError()

    def _ensure_slot_free(
        self,
        doctor_id: int,
        instant: datetime,
        exclude_id: Optional[int] = None,
    ) -> None:
        if self.is_slot_taken(doctor_id, instant, exclude_id=exclude_id):
            LOGGER.info("Slot taken doctor=%s time=%s", doctor_id, instant)
            raise SlotTakenError()

    def _raise_if_slot_violation(
        self,
        exc: IntegrityError,
        doctor_id: Optional[int],
        instant: Optional[datetime],
    ) -> None:
        """Translate a lost booking race into the regular slot-taken error."""

        message = str(exc.orig)
        if SLOT_INDEX_NAME in message or SLOT_INDEX_COLUMNS in message:
            LOGGER.warning(
                "Concurrent booking lost the race doctor=%s time=%s",
                doctor_id,
                instant,
            )
            raise SlotTakenError() from exc

    def _summaries(self, query: Select) -> List[AppointmentSummary]:
        rows = self.db.execute(query.order_by(Appointment.appointment_time, Appointment.id))
        return [
            AppointmentSummary(
                id=appointment.id,
                user_id=appointment.user_id,
                clinic_id=appointment.clinic_id,
                doctor_id=appointment.doctor_id,
                clinic_name=clinic_name,
                doctor_name=doctor_name,
                doctor_specialization=doctor_specialization,
                user_name=user_name,
                appointment_time=appointment.appointment_time,
                status=appointment.status,
                **{field: getattr(appointment, field) for field in PATIENT_FIELDS},
            )
            for appointment, clinic_name, doctor_name, doctor_specialization, user_name in rows
        ]


def _summary_query() -> Select:
    return (
        select(Appointment, Clinic.name, Doctor.name, Doctor.specialization, User.name)
        .join(Clinic, Clinic.id == Appointment.clinic_id)
        .join(Doctor, Doctor.id == Appointment.doctor_id)
        .join(User, User.id == Appointment.user_id)
    )
