from fastapi import APIRouter, Depends, Query

from voice_agent.api.deps import container_dep, http_error
from voice_agent.api.schemas.appointment import AvailableSlotsResponse, BusyInfo, SlotInfo
from voice_agent.core.config import settings
from voice_agent.core.container import Container
from voice_agent.core.errors import ToolError
from voice_agent.core.timezone import format_clock, normalize
from voice_agent.services.slot_service import day_window, free_slots

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=AvailableSlotsResponse)
async def available_slots(
    date_param: str = Query(..., alias="date"),
    container: Container = Depends(container_dep),
) -> AvailableSlotsResponse:
    """Busy events and free slots for the given day (home time)."""
    try:
        day = normalize(date_param)
        time_min, time_max = day_window(day)
        busy = await container.calendar.list_events(settings.calendar_id, time_min, time_max)
    except ToolError as e:
        raise http_error(e) from e
    return AvailableSlotsResponse(
        date=day.date().isoformat(),
        time_zone=settings.time_zone_name,
        busy=[BusyInfo(start=b.start, end=b.end, all_day=b.all_day, label=b.label) for b in busy],
        slots=[
            SlotInfo(start=s.start, end=s.end, label=format_clock(s.start))
            for s in free_slots(day, busy)
        ],
    )
