"""Clinic, specialization and doctor records and their read queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clinic_finder.models.appointment import Appointment
from clinic_finder.models.clinic import Clinic, ClinicSpecialization, Specialization
from clinic_finder.models.doctor import Doctor
from clinic_finder.models.user import User
from clinic_finder.schemas.clinic import ClinicCreate, DoctorCreate
from clinic_finder.services.db import transaction
from clinic_finder.services.errors import (
    DuplicateClinicError,
    NotFoundError,
    ReferenceNotFoundError,
)

LOGGER = logging.getLogger(__name__)

LOCATION_INDEX_NAME = "uq_clinics_location"
SPECIALIZATION_INDEX_NAME = "uq_specializations_name"


@dataclass(frozen=True)
class ClinicListing:
    """Read-only clinic row joined with its specialization names."""

    id: int
    name: str
    address: Optional[str]
    city: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    phone: Optional[str] = None
    website: Optional[str] = None
    timings: Optional[str] = None
    rating: Optional[float] = None
    reviews: Optional[int] = None
    image_url: Optional[str] = None
    specializations: Tuple[str, ...] = ()

    @classmethod
    def from_row(cls, clinic: Clinic, specializations: Iterable[str]) -> "ClinicListing":
        return cls(
            id=clinic.id,
            name=clinic.name,
            address=clinic.address,
            city=clinic.city,
            latitude=clinic.latitude,
            longitude=clinic.longitude,
            phone=clinic.phone,
            website=clinic.website,
            timings=clinic.timings,
            rating=clinic.rating,
            reviews=clinic.reviews,
            image_url=clinic.image_url,
            specializations=tuple(specializations),
        )


class ClinicCatalog:
    """Query and command surface over clinics, doctors and specializations."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Clinics
    # ------------------------------------------------------------------
    def list_clinics(self, city: Optional[str] = None) -> List[ClinicListing]:
        """Return clinics in id order, optionally limited to one city."""

        query = select(Clinic).order_by(Clinic.id)
        if city:
            query = query.where(func.lower(Clinic.city) == city.lower())

        clinics = list(self.db.scalars(query))
        names = self.specialization_names([clinic.id for clinic in clinics])
        return [ClinicListing.from_row(clinic, names.get(clinic.id, [])) for clinic in clinics]

    def get_clinic(self, clinic_id: int) -> Optional[Clinic]:
        return self.db.get(Clinic, clinic_id)

    def get_listing(self, clinic_id: int) -> ClinicListing:
        clinic = self.get_clinic(clinic_id)
        if clinic is None:
            raise NotFoundError("Clinic", clinic_id)
        names = self.specialization_names([clinic.id])
        return ClinicListing.from_row(clinic, names.get(clinic.id, []))

    def specialization_names(self, clinic_ids: List[int]) -> Dict[int, List[str]]:
        """Map each clinic id to its specialization names, sorted by name."""

        if not clinic_ids:
            return {}

        rows = self.db.execute(
            select(ClinicSpecialization.clinic_id, Specialization.name)
            .join(Specialization, Specialization.id == ClinicSpecialization.specialization_id)
            .where(ClinicSpecialization.clinic_id.in_(clinic_ids))
            .order_by(ClinicSpecialization.clinic_id, Specialization.name)
        )
        names: Dict[int, List[str]] = {}
        for clinic_id, name in rows:
            names.setdefault(clinic_id, []).append(name)
        return names

    def create_clinic(self, payload: ClinicCreate) -> ClinicListing:
        """Register a clinic, rejecting a second one at the same location."""

        try:
            with transaction(self.db):
                if self._location_taken(payload.name, payload.address, payload.city):
                    raise DuplicateClinicError()

                clinic = Clinic(
                    name=payload.name,
                    address=payload.address,
                    city=payload.city,
                    latitude=payload.latitude,
                    longitude=payload.longitude,
                    phone=payload.phone,
                    website=payload.website,
                    timings=payload.timings,
                    rating=payload.rating,
                    reviews=payload.reviews,
                    image_url=payload.image_url,
                )
                self.db.add(clinic)
                self.db.flush()

                # Specialization savepoints must nest inside the transaction the insert opened.
                if payload.specialization_ids:
                    specializations = self._specializations_by_id(payload.specialization_ids)
                else:
                    specializations = [
                        self.get_or_create_specialization(name)
                        for name in _unique_names(payload.specializations)
                    ]

                for specialization in specializations:
                    self.db.add(
                        ClinicSpecialization(
                            clinic_id=clinic.id,
                            specialization_id=specialization.id,
                        )
                    )
                self.db.flush()
        except IntegrityError as exc:
            if LOCATION_INDEX_NAME in str(exc.orig):
                raise DuplicateClinicError() from exc
            raise

        LOGGER.info("Created clinic id=%s name=%s city=%s", clinic.id, clinic.name, clinic.city)
        return self.get_listing(clinic.id)

    def delete_clinic(self, clinic_id: int) -> None:
        """Remove a clinic together with its doctors and their appointments.

        Dependants are deleted explicitly, children first, in one transaction.
        """

        with transaction(self.db):
            if self.get_clinic(clinic_id) is None:
                raise NotFoundError("Clinic", clinic_id)

            doctor_ids = select(Doctor.id).where(Doctor.clinic_id == clinic_id)
            self.db.execute(
                delete(Appointment).where(
                    or_(
                        Appointment.clinic_id == clinic_id,
                        Appointment.doctor_id.in_(doctor_ids),
                    )
                )
            )
            self.db.execute(delete(Doctor).where(Doctor.clinic_id == clinic_id))
            self.db.execute(
                delete(ClinicSpecialization).where(ClinicSpecialization.clinic_id == clinic_id)
            )
            self.db.execute(delete(Clinic).where(Clinic.id == clinic_id))

        LOGGER.info("Deleted clinic id=%s", clinic_id)

    def _location_taken(self, name: str, address: Optional[str], city: Optional[str]) -> bool:
        query = select(Clinic.id).where(func.lower(Clinic.name) == name.lower())
        for column, value in ((Clinic.address, address), (Clinic.city, city)):
            if value is None:
                query = query.where(column.is_(None))
            else:
                query = query.where(func.lower(column) == value.lower())
        return self.db.scalar(query.limit(1)) is not None

    # ------------------------------------------------------------------
    # Specializations
    # ------------------------------------------------------------------
    def list_specializations(self) -> List[str]:
        return list(self.db.scalars(select(Specialization.name).order_by(Specialization.name)))

    def find_specialization(self, name: str) -> Optional[Specialization]:
        return self.db.scalar(
            select(Specialization).where(func.lower(Specialization.name) == name.lower())
        )

    def get_or_create_specialization(self, name: str) -> Specialization:
        """Look a specialization up by name, creating it when missing.

        Runs inside the caller's transaction, so a failed write discards the
        new specialization too. The insert happens under a savepoint: when a
        concurrent writer commits the same name first, the savepoint is rolled
        back and that writer's row is returned.
        """

        existing = self.find_specialization(name)
        if existing is not None:
            return existing

        specialization = Specialization(name=name)
        try:
            with self.db.begin_nested():
                self.db.add(specialization)
        except IntegrityError as exc:
            if SPECIALIZATION_INDEX_NAME not in str(exc.orig):
                raise
            winner = self.find_specialization(name)
            if winner is None:
                raise
            LOGGER.info("Specialization name=%s was created concurrently", name)
            return winner

        LOGGER.info("Created specialization id=%s name=%s", specialization.id, name)
        return specialization

    def _specializations_by_id(self, ids: List[int]) -> List[Specialization]:
        found = {
            item.id: item
            for item in self.db.scalars(select(Specialization).where(Specialization.id.in_(ids)))
        }
        for specialization_id in ids:
            if specialization_id not in found:
                raise ReferenceNotFoundError("Specialization", specialization_id)
        return [found[specialization_id] for specialization_id in dict.fromkeys(ids)]

    # ------------------------------------------------------------------
    # Doctors and users
    # ------------------------------------------------------------------
    def get_doctor(self, doctor_id: int) -> Optional[Doctor]:
        return self.db.get(Doctor, doctor_id)

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def list_doctors(self, clinic_id: int, specialization: Optional[str] = None) -> List[Doctor]:
        """Return the clinic's doctors, optionally those of one specialization."""

        if self.get_clinic(clinic_id) is None:
            raise NotFoundError("Clinic", clinic_id)

        query = select(Doctor).where(Doctor.clinic_id == clinic_id).order_by(Doctor.id)
        if specialization:
            query = query.where(func.lower(Doctor.specialization) == specialization.lower())
        return list(self.db.scalars(query))

    def add_doctor(self, clinic_id: int, payload: DoctorCreate) -> Doctor:
        with transaction(self.db):
            if self.get_clinic(clinic_id) is None:
                raise NotFoundError("Clinic", clinic_id)

            doctor = Doctor(clinic_id=clinic_id, **payload.model_dump())
            self.db.add(doctor)
            self.db.flush()

        LOGGER.info("Added doctor id=%s to clinic id=%s", doctor.id, clinic_id)
        return doctor


def _unique_names(names: Iterable[str]) -> List[str]:
    """Drop blanks and case-insensitive repeats, keeping first spellings."""

    seen: Dict[str, str] = {}
    for name in names:
        cleaned = name.strip() if name else ""
        if cleaned and cleaned.lower() not in seen:
            seen[cleaned.lower()] = cleaned
    return list(seen.values())
