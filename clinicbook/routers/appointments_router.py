from typing import List

from fastapi import APIRouter, Depends

from ..application.ports.authorization import Actor
from ..application.services import BookingService
from ..exceptions import ForbiddenError
from ..schemas.scheduling import AppointmentResponse, CancellationRequest, CompletionRequest, ReservationCreate
from .deps import get_booking_service, get_current_actor

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _require_patient(actor: Actor) -> str:
    if not actor.patient_id:
        raise ForbiddenError("Only patients can book or list their appointments")
    return actor.patient_id


@router.post("/", response_model=AppointmentResponse, status_code=201)
def reserve_appointment(
    body: ReservationCreate,
    actor: Actor = Depends(get_current_actor),
    svc: BookingService = Depends(get_booking_service),
):
    appt = svc.reserve(_require_patient(actor), body.time_slot_id, reason=body.reason, points=body.points)
    return AppointmentResponse.model_validate(appt)


@router.get("/", response_model=List[AppointmentResponse])
def list_my_appointments(
    actor: Actor = Depends(get_current_actor),
    svc: BookingService = Depends(get_booking_service),
):
    return [AppointmentResponse.model_validate(a) for a in svc.list_for_patient(_require_patient(actor))]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: BookingService = Depends(get_booking_service),
):
    return AppointmentResponse.model_validate(svc.get_appointment(appointment_id, actor))


@router.put("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: str,
    body: CancellationRequest,
    actor: Actor = Depends(get_current_actor),
    svc: BookingService = Depends(get_booking_service),
):
    return AppointmentResponse.model_validate(svc.cancel(appointment_id, body.reason, actor))


@router.put("/{appointment_id}/check-in", response_model=AppointmentResponse)
def check_in_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: BookingService = Depends(get_booking_service),
):
    return AppointmentResponse.model_validate(svc.check_in(appointment_id, actor))


@router.put("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: str,
    body: CompletionRequest,
    actor: Actor = Depends(get_current_actor),
    svc: BookingService = Depends(get_booking_service),
):
    return AppointmentResponse.model_validate(svc.complete(appointment_id, actor, notes=body.notes))


@router.put("/{appointment_id}/no-show", response_model=AppointmentResponse)
def mark_appointment_no_show(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: BookingService = Depends(get_booking_service),
):
    return AppointmentResponse.model_validate(svc.mark_no_show(appointment_id, actor))
