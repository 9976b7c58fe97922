"""Distance computation and proximity ranking."""

import math
import random

import pytest

from clinic_finder.services.catalog import ClinicListing
from clinic_finder.services.geo import (
    EARTH_RADIUS_KM,
    GeoPoint,
    distance_km,
    rank_by_distance,
)

BENGALURU = GeoPoint(12.9716, 77.5946)
KM_PER_DEGREE = EARTH_RADIUS_KM * math.pi / 180


def clinic(clinic_id: int, lat, lng, name: str = "") -> ClinicListing:
    return ClinicListing(
        id=clinic_id,
        name=name or f"Clinic {clinic_id}",
        address=None,
        city="Bengaluru",
        latitude=lat,
        longitude=lng,
    )


def test_identical_points_are_zero_apart() -> None:
    assert distance_km(BENGALURU, BENGALURU) == 0.0


def test_one_degree_of_latitude() -> None:
    assert distance_km(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0)) == pytest.approx(KM_PER_DEGREE)


def test_antipodal_points_do_not_fail() -> None:
    distance = distance_km(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM)


def test_distance_is_symmetric_and_self_distance_is_zero() -> None:
    rng = random.Random(7)
    for _ in range(200):
        a = GeoPoint(rng.uniform(-90, 90), rng.uniform(-180, 180))
        b = GeoPoint(rng.uniform(-90, 90), rng.uniform(-180, 180))
        assert distance_km(a, a) == 0.0
        assert distance_km(a, b) == pytest.approx(distance_km(b, a), abs=1e-6)


def test_clinic_at_origin_ranks_first() -> None:
    clinics = [
        clinic(1, 13.0827, 80.2707),
        clinic(2, 12.9352, 77.6245),
        clinic(3, BENGALURU.lat, BENGALURU.lng),
    ]

    ranked = rank_by_distance(BENGALURU, clinics)

    assert ranked[0].clinic.id == 3
    assert ranked[0].distance_km == 0.0
    assert [item.clinic.id for item in ranked] == [3, 2, 1]


def test_radius_keeps_only_clinics_within_it() -> None:
    near = clinic(1, 0.0, 0.0)
    far = clinic(2, 10 / KM_PER_DEGREE, 0.0)

    ranked = rank_by_distance(GeoPoint(0.0, 0.0), [far, near], radius_km=5)

    assert [item.clinic.id for item in ranked] == [1]


def test_radius_boundary_is_inclusive() -> None:
    edge = clinic(1, 1.0, 0.0)
    radius = distance_km(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))

    assert len(rank_by_distance(GeoPoint(0.0, 0.0), [edge], radius_km=radius)) == 1


def test_ranking_is_sorted_and_radius_is_sound() -> None:
    rng = random.Random(11)
    clinics = [
        clinic(index, rng.uniform(12.5, 13.5), rng.uniform(77.0, 78.0))
        for index in range(50)
    ]
    radius = 30.0

    everything = rank_by_distance(BENGALURU, clinics)
    within = rank_by_distance(BENGALURU, clinics, radius_km=radius)

    distances = [item.distance_km for item in everything]
    assert distances == sorted(distances)
    assert len(everything) == len(clinics)

    kept = {item.clinic.id for item in within}
    for item in everything:
        assert (item.clinic.id in kept) == (item.distance_km <= radius)


def test_equal_distances_keep_input_order() -> None:
    clinics = [clinic(5, 1.0, 0.0), clinic(3, -1.0, 0.0), clinic(9, 0.0, 1.0)]

    ranked = rank_by_distance(GeoPoint(0.0, 0.0), clinics)

    assert [item.clinic.id for item in ranked] == [5, 3, 9]


def test_no_clinics_in_range_is_empty() -> None:
    assert rank_by_distance(BENGALURU, [clinic(1, 0.0, 0.0)], radius_km=1) == []
    assert rank_by_distance(BENGALURU, []) == []


def test_clinics_without_coordinates_are_skipped() -> None:
    ranked = rank_by_distance(BENGALURU, [clinic(1, None, None), clinic(2, 12.9, 77.6)])

    assert [item.clinic.id for item in ranked] == [2]
