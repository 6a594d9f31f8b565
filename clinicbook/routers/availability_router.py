from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query

from ..application.services import AvailabilityService
from ..schemas.scheduling import TimeSlotResponse
from .deps import get_availability_service

router = APIRouter(tags=["Availability"])


@router.get("/providers/{provider_id}/time-slots", response_model=List[TimeSlotResponse])
def get_provider_time_slots(
    provider_id: str,
    work_date: date = Query(alias="date"),
    open_only: bool = False,
    svc: AvailabilityService = Depends(get_availability_service),
):
    # only published schedules are visible here
    slots = svc.open_slots(provider_id, work_date) if open_only else svc.published_slots(provider_id, work_date)
    return [TimeSlotResponse.model_validate(s) for s in slots]


@router.get("/availability/providers", response_model=List[str])
def get_available_providers(
    work_date: date = Query(alias="date"),
    svc: AvailabilityService = Depends(get_availability_service),
):
    return svc.providers_with_open_slots(work_date)
