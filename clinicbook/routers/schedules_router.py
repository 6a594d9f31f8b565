from datetime import date, time
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from ..application.ports.authorization import Actor
from ..application.services import ScheduleService
from ..schemas.scheduling import (
    ScheduleCreate,
    ScheduleDetailResponse,
    ScheduleResponse,
    SlotCapacityUpdate,
    SlotPreview,
    TimeSlotResponse,
)
from .deps import get_current_actor, get_schedule_service

router = APIRouter(tags=["Schedules"])


@router.post("/providers/{provider_id}/schedules", response_model=ScheduleDetailResponse, status_code=201)
def create_schedule(
    provider_id: str,
    body: ScheduleCreate,
    actor: Actor = Depends(get_current_actor),
    svc: ScheduleService = Depends(get_schedule_service),
):
    created = svc.create_schedule(
        actor,
        provider_id,
        body.work_date,
        body.start_time,
        body.end_time,
        slot_minutes=body.slot_minutes,
        location=body.location,
        published=body.publish,
    )
    return ScheduleDetailResponse.model_validate(created)


@router.get("/providers/{provider_id}/schedules", response_model=List[ScheduleResponse])
def list_provider_schedules(
    provider_id: str,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    svc: ScheduleService = Depends(get_schedule_service),
):
    return [ScheduleResponse.model_validate(s) for s in svc.list_schedules(provider_id, date_from, date_to)]


@router.get("/schedules/preview", response_model=List[SlotPreview])
def preview_schedule_slots(
    start_time: time,
    end_time: time,
    slot_minutes: Optional[int] = None,
    svc: ScheduleService = Depends(get_schedule_service),
):
    return [SlotPreview.model_validate(d) for d in svc.preview_slots(start_time, end_time, slot_minutes)]


@router.get("/schedules/{schedule_id}", response_model=ScheduleDetailResponse)
def get_schedule(schedule_id: str, svc: ScheduleService = Depends(get_schedule_service)):
    return ScheduleDetailResponse.model_validate(svc.get_schedule(schedule_id))


@router.post("/schedules/{schedule_id}/publish", status_code=204)
def publish_schedule(
    schedule_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: ScheduleService = Depends(get_schedule_service),
):
    svc.publish(actor, schedule_id)
    return Response(status_code=204)


@router.post("/schedules/{schedule_id}/unpublish", status_code=204)
def unpublish_schedule(
    schedule_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: ScheduleService = Depends(get_schedule_service),
):
    svc.unpublish(actor, schedule_id)
    return Response(status_code=204)


@router.delete("/schedules/{schedule_id}", status_code=204)
def delete_schedule(
    schedule_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: ScheduleService = Depends(get_schedule_service),
):
    svc.delete_schedule(actor, schedule_id)
    return Response(status_code=204)


@router.get("/time-slots/{slot_id}", response_model=TimeSlotResponse)
def get_time_slot(slot_id: str, svc: ScheduleService = Depends(get_schedule_service)):
    return TimeSlotResponse.model_validate(svc.get_time_slot(slot_id))


@router.post("/time-slots/{slot_id}/close", response_model=TimeSlotResponse)
def close_time_slot(
    slot_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: ScheduleService = Depends(get_schedule_service),
):
    return TimeSlotResponse.model_validate(svc.close_slot(actor, slot_id))


@router.post("/time-slots/{slot_id}/reopen", response_model=TimeSlotResponse)
def reopen_time_slot(
    slot_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: ScheduleService = Depends(get_schedule_service),
):
    return TimeSlotResponse.model_validate(svc.reopen_slot(actor, slot_id))


@router.put("/time-slots/{slot_id}/capacity", response_model=TimeSlotResponse)
def update_time_slot_capacity(
    slot_id: str,
    body: SlotCapacityUpdate,
    actor: Actor = Depends(get_current_actor),
    svc: ScheduleService = Depends(get_schedule_service),
):
    return TimeSlotResponse.model_validate(svc.set_slot_capacity(actor, slot_id, body.capacity))
