from datetime import date, datetime, time, timedelta, timezone

from pydantic import BaseModel, ConfigDict, EmailStr, model_validator


class Contact(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    name: str | None = None


class BusyInterval(BaseModel):
    """An existing calendar event, as a half-open interval [start, end).

    All-day events carry home-midnight bounds with an exclusive end date, the
    way the calendar API reports them, and cover every date in between.
    """

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    all_day: bool = False
    label: str = ""

    @model_validator(mode="after")
    def _check_bounds(self) -> "BusyInterval":
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("BusyInterval bounds must be timezone-aware")
        return self

    @classmethod
    def all_day_event(
        cls,
        start_date: date,
        tz: timezone,
        label: str = "",
        end_date: date | None = None,
    ) -> "BusyInterval":
        if end_date is None or end_date <= start_date:
            end_date = start_date + timedelta(days=1)
        return cls(
            start=datetime.combine(start_date, time(), tzinfo=tz),
            end=datetime.combine(end_date, time(), tzinfo=tz),
            all_day=True,
            label=label,
        )

    def covers_date(self, d: date) -> bool:
        if not self.all_day:
            return False
        return self.start.date() <= d < self.end.date()

    def contains(self, instant: datetime) -> bool:
        if self.all_day:
            return self.covers_date(instant.astimezone(self.start.tzinfo).date())
        return self.start <= instant < self.end


class Slot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    duration_minutes: int = 30

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)


class Appointment(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    start: datetime
    end: datetime
    attendee: Contact

    @model_validator(mode="after")
    def _check_order(self) -> "Appointment":
        if self.end <= self.start:
            raise ValueError("Appointment must end after it starts")
        return self


class EventRef(BaseModel):
    id: str
    html_link: str | None = None
