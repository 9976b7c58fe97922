"""Clinic, doctor and specialization payloads."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from clinic_finder.schemas.base import CamelModel


class ClinicCreate(CamelModel):
    """Inbound clinic registration.

    Specializations may be given by id or by name; ids win when both are
    present, and unknown names are created on the fly.
    """

    name: str = Field(min_length=1)
    address: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    phone: Optional[str] = None
    website: Optional[str] = None
    timings: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    reviews: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    specialization_ids: List[int] = Field(default_factory=list)
    specializations: List[str] = Field(default_factory=list)


class ClinicSummary(CamelModel):
    """Clinic as returned by the filtered listing."""

    id: int
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = None
    rating: Optional[float] = None
    reviews: Optional[int] = None
    image_url: Optional[str] = None
    specializations: List[str] = Field(default_factory=list)


class NearbyClinic(CamelModel):
    """Clinic with its distance from the caller's position."""

    id: int
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    lat: float
    lng: float
    distance_km: float
    phone: Optional[str] = None
    rating: Optional[float] = None
    reviews: Optional[int] = None
    image_url: Optional[str] = None
    specializations: List[str] = Field(default_factory=list)


class DoctorCreate(CamelModel):
    name: str = Field(min_length=1)
    specialization: Optional[str] = None
    qualifications: Optional[str] = None
    experience: Optional[str] = None
    biography: Optional[str] = None
    image_url: Optional[str] = None


class DoctorResponse(DoctorCreate):
    id: int
    clinic_id: int


class ClinicDetail(ClinicSummary):
    """Full clinic profile including its doctors."""

    website: Optional[str] = None
    timings: Optional[str] = None
    doctors: List[DoctorResponse] = Field(default_factory=list)
