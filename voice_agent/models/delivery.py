from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr


class DeliveryChannel(str, Enum):
    CLOUD_DOC = "cloud_doc"
    EMAIL = "email"
    STATIC_FILE = "static_file"
    INLINE = "inline"


class DeliverySuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    reference: str


class DeliveryFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    reason: str


DeliveryResult = DeliverySuccess | DeliveryFailure


class DeliveryAttempt(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel: DeliveryChannel
    result: DeliveryResult

    @property
    def succeeded(self) -> bool:
        return isinstance(self.result, DeliverySuccess)


class DeliveryRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    topic: str
    format: str = "Document"
    recipient: EmailStr | None = None

    @property
    def title(self) -> str:
        return f"{self.topic} - {self.format} (Draft)"


class DeliveryOutcome(BaseModel):
    channel: DeliveryChannel
    message: str
    reference: str | None = None
    attempts: list[DeliveryAttempt] = []
