"""Great-circle distance ranking for clinic discovery."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, List, NamedTuple, Optional

LOGGER = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class GeoPoint(NamedTuple):
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


class RankedClinic(NamedTuple):
    """A clinic paired with its distance from the query origin."""

    clinic: Any
    distance_km: float


def distance_km(origin: GeoPoint, target: GeoPoint) -> float:
    """Return the spherical-law-of-cosines distance between two points.

    The cosine term is clamped to [-1, 1]: rounding pushes it just past 1.0
    for coincident points and just past -1.0 for antipodal ones, and
    ``math.acos`` raises outside that range.
    """

    if origin == target:
        return 0.0

    lat1 = math.radians(origin.lat)
    lat2 = math.radians(target.lat)
    delta_lng = math.radians(target.lng - origin.lng)

    cosine = (
        math.sin(lat1) * math.sin(lat2)
        + math.cos(lat1) * math.cos(lat2) * math.cos(delta_lng)
    )
    cosine = max(-1.0, min(1.0, cosine))
    return EARTH_RADIUS_KM * math.acos(cosine)


def rank_by_distance(
    origin: GeoPoint,
    clinics: Iterable[Any],
    radius_km: Optional[float] = None,
) -> List[RankedClinic]:
    """Order clinics nearest first, optionally dropping those beyond a radius.

    Clinics need ``latitude`` and ``longitude`` attributes; those missing
    either coordinate are skipped. Equal distances keep their input order.
    """

    ranked: List[RankedClinic] = []
    for clinic in clinics:
        if clinic.latitude is None or clinic.longitude is None:
            LOGGER.debug("Skipping clinic %s without coordinates", clinic.id)
            continue

        distance = distance_km(origin, GeoPoint(clinic.latitude, clinic.longitude))
        if radius_km is not None and distance > radius_km:
            continue
        ranked.append(RankedClinic(clinic, distance))

    ranked.sort(key=lambda item: item.distance_km)
    return ranked
