# clinicbook/schemas/scheduling/schedule.py
from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScheduleCreate(BaseModel):
    work_date: date
    start_time: time  # HH:MM
    end_time: time  # HH:MM
    slot_minutes: Optional[int] = Field(default=None, gt=0)
    location: Optional[str] = Field(default=None, max_length=120)
    publish: Optional[bool] = None


class TimeSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    schedule_id: str
    start_time: time
    end_time: time
    capacity: int
    booked_count: int
    status: str


class SlotPreview(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_time: time
    end_time: time


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    provider_id: str
    work_date: date
    start_time: time
    end_time: time
    slot_minutes: int
    location: Optional[str] = None
    is_published: bool
    created_at: Optional[datetime] = None


class ScheduleDetailResponse(ScheduleResponse):
    time_slots: List[TimeSlotResponse] = []


class SlotCapacityUpdate(BaseModel):
    capacity: int = Field(ge=1)
