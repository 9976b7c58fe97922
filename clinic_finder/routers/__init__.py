"""API router initializers."""

from fastapi import APIRouter


def get_api_router() -> APIRouter:
    """Construct and return the API router."""

    from clinic_finder.routers.appointments import router as appointments_router
    from clinic_finder.routers.clinics import router as clinics_router
    from clinic_finder.routers.specializations import router as specializations_router

    api_router = APIRouter()
    api_router.include_router(clinics_router, prefix="/clinics", tags=["clinics"])
    api_router.include_router(
        specializations_router,
        prefix="/specializations",
        tags=["specializations"],
    )
    api_router.include_router(
        appointments_router,
        prefix="/appointments",
        tags=["appointments"],
    )
    return api_router
