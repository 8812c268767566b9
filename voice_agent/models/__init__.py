from voice_agent.models.calendar import Appointment, BusyInterval, Contact, EventRef, Slot
from voice_agent.models.delivery import (
    DeliveryAttempt,
    DeliveryChannel,
    DeliveryFailure,
    DeliveryOutcome,
    DeliveryRequest,
    DeliveryResult,
    DeliverySuccess,
)
from voice_agent.models.document import Corpus, DocumentRecord, SearchHit

__all__ = [
    "Appointment",
    "BusyInterval",
    "Contact",
    "EventRef",
    "Slot",
    "DeliveryAttempt",
    "DeliveryChannel",
    "DeliveryFailure",
    "DeliveryOutcome",
    "DeliveryRequest",
    "DeliveryResult",
    "DeliverySuccess",
    "Corpus",
    "DocumentRecord",
    "SearchHit",
]
