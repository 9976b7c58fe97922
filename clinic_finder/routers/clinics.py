"""Clinic discovery and catalog router."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from clinic_finder.schemas.clinic import (
    ClinicCreate,
    ClinicDetail,
    ClinicSummary,
    DoctorCreate,
    DoctorResponse,
    NearbyClinic,
)
from clinic_finder.services.catalog import ClinicCatalog, ClinicListing
from clinic_finder.services.db import get_db
from clinic_finder.services.geo import GeoPoint, RankedClinic, rank_by_distance
from clinic_finder.services.matcher import filter_and_rank
from clinic_finder.utils.config import get_settings

LOGGER = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


def get_catalog(db: Session = Depends(get_db)) -> ClinicCatalog:
    return ClinicCatalog(db)


def _requested_specializations(
    specializations: Optional[List[str]],
    spec: Optional[List[str]],
) -> List[str]:
    return [*(specializations or []), *(spec or [])]


def _nearby(item: RankedClinic) -> NearbyClinic:
    clinic: ClinicListing = item.clinic
    return NearbyClinic(
        id=clinic.id,
        name=clinic.name,
        address=clinic.address,
        city=clinic.city,
        lat=clinic.latitude,
        lng=clinic.longitude,
        distance_km=round(item.distance_km, 3),
        phone=clinic.phone,
        rating=clinic.rating,
        reviews=clinic.reviews,
        image_url=clinic.image_url,
        specializations=list(clinic.specializations),
    )


@router.get("", response_model=List[ClinicSummary])
def list_clinics(
    city: Optional[str] = Query(default=None),
    specializations: Optional[List[str]] = Query(default=None),
    spec: Optional[List[str]] = Query(default=None),
    search: Optional[str] = Query(default=None),
    catalog: ClinicCatalog = Depends(get_catalog),
) -> List[ClinicSummary]:
    """Filter clinics by city, then specialization matches, then free text."""

    clinics = filter_and_rank(
        catalog.list_clinics(city=city),
        city=city,
        specializations=_requested_specializations(specializations, spec),
        search=search,
    )
    return [ClinicSummary.model_validate(clinic) for clinic in clinics]


@router.get("/nearby", response_model=List[NearbyClinic])
def list_nearby_clinics(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    radius_km: Optional[float] = Query(default=None, gt=0, alias="radiusKm"),
    catalog: ClinicCatalog = Depends(get_catalog),
) -> List[NearbyClinic]:
    """Return clinics within the search radius, nearest first."""

    radius = radius_km if radius_km is not None else settings.nearby_radius_km
    ranked = rank_by_distance(GeoPoint(lat, lng), catalog.list_clinics(), radius_km=radius)

    LOGGER.debug("Nearby search lat=%s lng=%s radius=%s found=%d", lat, lng, radius, len(ranked))
    return [_nearby(item) for item in ranked]


@router.get("/sorted-by-distance", response_model=List[NearbyClinic])
def list_clinics_by_distance(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    city: Optional[str] = Query(default=None),
    specializations: Optional[List[str]] = Query(default=None),
    spec: Optional[List[str]] = Query(default=None),
    search: Optional[str] = Query(default=None),
    catalog: ClinicCatalog = Depends(get_catalog),
) -> List[NearbyClinic]:
    """Apply the clinic filters, then order every match by distance."""

    clinics = filter_and_rank(
        catalog.list_clinics(city=city),
        city=city,
        specializations=_requested_specializations(specializations, spec),
        search=search,
    )
    return [_nearby(item) for item in rank_by_distance(GeoPoint(lat, lng), clinics)]


@router.get("/{clinic_id}", response_model=ClinicDetail)
def get_clinic(
    clinic_id: int,
    catalog: ClinicCatalog = Depends(get_catalog),
) -> ClinicDetail:
    listing = catalog.get_listing(clinic_id)
    doctors = catalog.list_doctors(clinic_id)
    return ClinicDetail.model_validate(
        {
            **ClinicSummary.model_validate(listing).model_dump(),
            "website": listing.website,
            "timings": listing.timings,
            "doctors": [DoctorResponse.model_validate(doctor) for doctor in doctors],
        }
    )


@router.post("", response_model=ClinicSummary, status_code=status.HTTP_201_CREATED)
def create_clinic(
    payload: ClinicCreate,
    catalog: ClinicCatalog = Depends(get_catalog),
) -> ClinicSummary:
    return ClinicSummary.model_validate(catalog.create_clinic(payload))


@router.delete("/{clinic_id}")
def delete_clinic(
    clinic_id: int,
    catalog: ClinicCatalog = Depends(get_catalog),
) -> dict[str, str]:
    catalog.delete_clinic(clinic_id)
    return {"message": "Clinic deleted successfully"}


@router.get("/{clinic_id}/doctors", response_model=List[DoctorResponse])
def list_doctors(
    clinic_id: int,
    specialization: Optional[str] = Query(default=None),
    catalog: ClinicCatalog = Depends(get_catalog),
) -> List[DoctorResponse]:
    doctors = catalog.list_doctors(clinic_id, specialization=specialization)
    return [DoctorResponse.model_validate(doctor) for doctor in doctors]


@router.post(
    "/{clinic_id}/doctors",
    response_model=DoctorResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_doctor(
    clinic_id: int,
    payload: DoctorCreate,
    catalog: ClinicCatalog = Depends(get_catalog),
) -> DoctorResponse:
    return DoctorResponse.model_validate(catalog.add_doctor(clinic_id, payload))
