from pydantic import BaseModel, EmailStr

from voice_agent.models.delivery import DeliveryAttempt, DeliveryChannel


class CollateralRequest(BaseModel):
    topic: str
    format: str = "One-Pager"
    recipient_email: EmailStr | None = None


class CollateralResponse(BaseModel):
    channel: DeliveryChannel
    message: str
    reference: str | None = None
    attempts: list[DeliveryAttempt]
