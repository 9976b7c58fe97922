"""Clinic filtering pipeline: city, then specialization, then free text."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Set

LOGGER = logging.getLogger(__name__)

FilterStage = Callable[[List[Any]], List[Any]]


def normalize_specializations(names: Optional[Iterable[Optional[str]]]) -> Set[str]:
    """Lower-case requested names, ignoring blank entries."""

    if not names:
        return set()
    return {name.strip().lower() for name in names if name and name.strip()}


def match_count(clinic: Any, requested: Set[str]) -> int:
    """Count the clinic's distinct specializations present in ``requested``."""

    if not requested:
        return 0
    offered = {name.lower() for name in clinic.specializations if name and name.strip()}
    return len(offered & requested)


def city_stage(city: str) -> FilterStage:
    wanted = city.lower()

    def apply(clinics: List[Any]) -> List[Any]:
        return [clinic for clinic in clinics if clinic.city and clinic.city.lower() == wanted]

    return apply


def specialization_stage(requested: Set[str]) -> FilterStage:
    """Keep clinics matching at least one name, most matches first.

    The sort is stable, so clinics with equal counts stay in city-list order.
    """

    def apply(clinics: List[Any]) -> List[Any]:
        scored = [(match_count(clinic, requested), clinic) for clinic in clinics]
        scored = [item for item in scored if item[0] > 0]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [clinic for _, clinic in scored]

    return apply


def text_stage(search: str) -> FilterStage:
    needle = search.lower()

    def matches(clinic: Any) -> bool:
        for value in (clinic.name, clinic.address, clinic.city):
            if value and needle in value.lower():
                return True
        return False

    def apply(clinics: List[Any]) -> List[Any]:
        return [clinic for clinic in clinics if matches(clinic)]

    return apply


def build_pipeline(
    city: Optional[str] = None,
    specializations: Optional[Iterable[Optional[str]]] = None,
    search: Optional[str] = None,
) -> List[FilterStage]:
    """Return the stages that apply to the given inputs, in their fixed order."""

    stages: List[FilterStage] = []
    if city:
        stages.append(city_stage(city))

    requested = normalize_specializations(specializations)
    if requested:
        stages.append(specialization_stage(requested))

    if search:
        stages.append(text_stage(search))
    return stages


def filter_and_rank(
    clinics: Iterable[Any],
    city: Optional[str] = None,
    specializations: Optional[Iterable[Optional[str]]] = None,
    search: Optional[str] = None,
) -> List[Any]:
    """Run the city, specialization and text stages over ``clinics``."""

    result = list(clinics)
    for stage in build_pipeline(city, specializations, search):
        result = stage(result)

    LOGGER.debug(
        "Clinic filter city=%s specializations=%s search=%s matched=%d",
        city,
        specializations,
        search,
        len(result),
    )
    return result
