"""Specialization lookup router."""

from typing import List

from fastapi import APIRouter, Depends

from clinic_finder.routers.clinics import get_catalog
from clinic_finder.services.catalog import ClinicCatalog

router = APIRouter()


@router.get("", response_model=List[str])
def list_specializations(catalog: ClinicCatalog = Depends(get_catalog)) -> List[str]:
    """Return every known specialization name, alphabetically."""

    return catalog.list_specializations()
