from fastapi import APIRouter

from triage_link.api.health import router as health_router
from triage_link.api.intake import router as intake_router
from triage_link.api.patients import router as patients_router
from triage_link.api.provider import router as provider_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(intake_router, prefix="/v1", tags=["intake"])
router.include_router(provider_router, prefix="/v1", tags=["provider"])
router.include_router(patients_router, prefix="/v1", tags=["patients"])
