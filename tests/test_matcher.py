"""City, specialization and free-text clinic filtering."""

from typing import Optional, Sequence

from clinic_finder.services.catalog import ClinicListing
from clinic_finder.services.matcher import (
    build_pipeline,
    filter_and_rank,
    match_count,
    normalize_specializations,
)


def clinic(
    clinic_id: int,
    specializations: Sequence[str] = (),
    city: Optional[str] = "Pune",
    name: Optional[str] = None,
    address: Optional[str] = None,
) -> ClinicListing:
    return ClinicListing(
        id=clinic_id,
        name=name or f"Clinic {clinic_id}",
        address=address,
        city=city,
        latitude=None,
        longitude=None,
        specializations=tuple(specializations),
    )


def ids(clinics) -> list:
    return [item.id for item in clinics]


def test_no_filters_returns_everything_in_input_order() -> None:
    clinics = [clinic(3), clinic(1), clinic(2)]

    assert ids(filter_and_rank(clinics)) == [3, 1, 2]
    assert build_pipeline() == []


def test_city_is_matched_case_insensitively() -> None:
    clinics = [clinic(1, city="Pune"), clinic(2, city="Mumbai"), clinic(3, city="PUNE"), clinic(4, city=None)]

    assert ids(filter_and_rank(clinics, city="pune")) == [1, 3]


def test_more_matching_specializations_rank_first() -> None:
    clinics = [
        clinic(1, ["Cardiology"]),
        clinic(2, ["Dermatology"]),
        clinic(3, ["Cardiology", "Neurology", "Dermatology"]),
    ]

    result = filter_and_rank(clinics, specializations=["cardiology", "NEUROLOGY"])

    assert ids(result) == [3, 1]


def test_single_requested_specialization_excludes_non_matches() -> None:
    clinics = [clinic(1, ["Orthopedics"]), clinic(2, ["Cardiology", "Orthopedics"])]

    assert ids(filter_and_rank(clinics, specializations=["Cardiology"])) == [2]


def test_equal_match_counts_keep_city_list_order() -> None:
    clinics = [
        clinic(7, ["ENT", "Cardiology"]),
        clinic(2, ["Cardiology"]),
        clinic(5, ["Cardiology", "ENT"]),
        clinic(1, ["Cardiology"]),
    ]

    result = filter_and_rank(clinics, specializations=["Cardiology", "ENT"])

    assert ids(result) == [7, 5, 2, 1]


def test_blank_specializations_are_ignored() -> None:
    clinics = [clinic(1, ["Cardiology"]), clinic(2)]

    assert normalize_specializations(["", "  ", None]) == set()
    assert ids(filter_and_rank(clinics, specializations=["", "  "])) == [1, 2]


def test_match_count_grows_when_an_offered_specialization_is_requested() -> None:
    subject = clinic(1, ["Cardiology", "Neurology", "Oncology"])
    requested = set()

    previous = match_count(subject, requested)
    for name in ["oncology", "pediatrics", "neurology", "cardiology"]:
        requested = requested | {name}
        current = match_count(subject, requested)
        assert current >= previous
        previous = current

    assert previous == 3


def test_duplicate_offered_names_count_once() -> None:
    subject = clinic(1, ["Cardiology", "cardiology"])

    assert match_count(subject, {"cardiology"}) == 1


def test_search_matches_name_address_or_city() -> None:
    clinics = [
        clinic(1, name="Sunrise Hospital"),
        clinic(2, address="12 Sunrise Lane"),
        clinic(3, city="Sunrise Valley"),
        clinic(4, name="Other", address=None, city=None),
    ]

    assert ids(filter_and_rank(clinics, search="SUNRISE")) == [1, 2, 3]


def test_search_filters_without_reordering() -> None:
    clinics = [
        clinic(1, ["Cardiology"], name="Apollo North"),
        clinic(2, ["Cardiology", "ENT"], name="Fortis"),
        clinic(3, ["Cardiology", "ENT"], name="Apollo South"),
    ]

    result = filter_and_rank(clinics, specializations=["cardiology", "ent"], search="apollo")

    assert ids(result) == [3, 1]


def test_all_stages_compose_in_order() -> None:
    clinics = [
        clinic(1, ["Cardiology"], city="Delhi", name="Max"),
        clinic(2, ["Cardiology", "ENT"], city="Pune", name="Max Pune"),
        clinic(3, ["Cardiology"], city="pune", name="Max Care"),
        clinic(4, ["ENT"], city="Pune", name="Ruby"),
    ]

    result = filter_and_rank(
        clinics,
        city="PUNE",
        specializations=["Cardiology", "ENT"],
        search="max",
    )

    assert ids(result) == [2, 3]
