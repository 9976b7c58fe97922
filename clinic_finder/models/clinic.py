"""Clinic and specialization ORM models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from clinic_finder.models.base import Base


class Clinic(Base):
    """A clinic location patients can search for and book into."""

    __tablename__ = "clinics"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, index=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    timings: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    reviews: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
    )


class Specialization(Base):
    """A medical specialization offered by one or more clinics."""

    __tablename__ = "specializations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)


class ClinicSpecialization(Base):
    """Link row between a clinic and a specialization."""

    __tablename__ = "clinic_specializations"

    clinic_id: Mapped[int] = mapped_column(
        ForeignKey("clinics.id"),
        primary_key=True,
    )
    specialization_id: Mapped[int] = mapped_column(
        ForeignKey("specializations.id"),
        primary_key=True,
    )

    __table_args__ = (
        Index("ix_clinic_specializations_specialization", "specialization_id"),
    )


Index(
    "uq_clinics_location",
    func.lower(Clinic.name),
    func.lower(Clinic.address),
    func.lower(Clinic.city),
    unique=True,
)
Index("uq_specializations_name", func.lower(Specialization.name), unique=True)
