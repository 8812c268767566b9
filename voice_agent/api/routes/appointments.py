import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status

from voice_agent.api.deps import container_dep, http_error
from voice_agent.api.schemas.appointment import AppointmentPublic, BookAppointmentRequest
from voice_agent.core.config import settings
from voice_agent.core.container import Container
from voice_agent.core.errors import ToolError
from voice_agent.services.appointment_service import create_appointment
from voice_agent.services.email_service import send_appointment_confirmation_email

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: BookAppointmentRequest,
    background_tasks: BackgroundTasks,
    container: Container = Depends(container_dep),
) -> AppointmentPublic:
    try:
        appointment, ref = await create_appointment(
            container.calendar,
            body.title,
            body.date_time,
            body.attendee_email,
            body.duration_minutes,
        )
    except ToolError as e:
        raise http_error(e) from e
    if settings.send_booking_confirmation and settings.email_enabled:
        # Send confirmation email in background (uses sync SMTP)
        background_tasks.add_task(send_appointment_confirmation_email, appointment)
    return AppointmentPublic(
        title=appointment.title,
        start=appointment.start,
        end=appointment.end,
        attendee_email=appointment.attendee.email,
        event_id=ref.id,
        html_link=ref.html_link,
    )
