"""Shared fixtures: an in-memory SQLite store and entity factories."""

import os

os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime  # noqa: E402
from typing import Callable, Iterator, Optional, Sequence  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from clinic_finder.models.clinic import Clinic, ClinicSpecialization, Specialization  # noqa: E402
from clinic_finder.models.doctor import Doctor  # noqa: E402
from clinic_finder.models.user import User  # noqa: E402
from clinic_finder.services.db import SessionLocal, drop_db, init_db  # noqa: E402
from clinic_finder.services.scheduler import AppointmentScheduler  # noqa: E402

FIXED_NOW = datetime(2025, 1, 1, 9, 0, 0)


@pytest.fixture(autouse=True)
def schema() -> Iterator[None]:
    init_db()
    yield
    drop_db()


@pytest.fixture
def db_session() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def scheduler(db_session: Session) -> AppointmentScheduler:
    return AppointmentScheduler(db_session, clock=lambda: FIXED_NOW)


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def factory(name: str = "Asha Rao", email: Optional[str] = None) -> User:
        user = User(name=name, email=email)
        db_session.add(user)
        db_session.commit()
        return user

    return factory


@pytest.fixture
def make_clinic(db_session: Session) -> Callable[..., Clinic]:
    def factory(
        name: str = "City Care",
        city: str = "Bengaluru",
        address: str = "MG Road",
        latitude: float = 12.9716,
        longitude: float = 77.5946,
        specializations: Sequence[str] = (),
    ) -> Clinic:
        clinic = Clinic(
            name=name,
            address=address,
            city=city,
            latitude=latitude,
            longitude=longitude,
        )
        db_session.add(clinic)
        db_session.flush()
        for spec_name in specializations:
            specialization = db_session.scalar(
                select(Specialization).where(Specialization.name == spec_name)
            )
            if specialization is None:
                specialization = Specialization(name=spec_name)
                db_session.add(specialization)
                db_session.flush()
            db_session.add(
                ClinicSpecialization(clinic_id=clinic.id, specialization_id=specialization.id)
            )
        db_session.commit()
        return clinic

    return factory


@pytest.fixture
def make_doctor(db_session: Session) -> Callable[..., Doctor]:
    def factory(clinic: Clinic, name: str = "Dr. Mehta", specialization: str = "Cardiology") -> Doctor:
        doctor = Doctor(clinic_id=clinic.id, name=name, specialization=specialization)
        db_session.add(doctor)
        db_session.commit()
        return doctor

    return factory
