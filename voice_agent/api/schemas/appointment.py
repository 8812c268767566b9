from datetime import datetime

from pydantic import BaseModel, Field


class SlotInfo(BaseModel):
    start: datetime
    end: datetime
    label: str  # e.g. "09:30 AM"


class BusyInfo(BaseModel):
    start: datetime
    end: datetime
    all_day: bool
    label: str


class AvailableSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD, home time
    time_zone: str
    busy: list[BusyInfo]
    slots: list[SlotInfo]


class BookAppointmentRequest(BaseModel):
    title: str
    date_time: str = Field(description="Start, read as wall-clock time in the home zone")
    attendee_email: str
    duration_minutes: int | None = None


class AppointmentPublic(BaseModel):
    title: str
    start: datetime
    end: datetime
    attendee_email: str
    event_id: str
    html_link: str | None = None
