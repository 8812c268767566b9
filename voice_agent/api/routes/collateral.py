from fastapi import APIRouter, Depends

from voice_agent.api.deps import container_dep, http_error
from voice_agent.api.schemas.collateral import CollateralRequest, CollateralResponse
from voice_agent.core.container import Container
from voice_agent.core.errors import ToolError
from voice_agent.models.delivery import DeliveryRequest
from voice_agent.services.content_service import generate_collateral_text

router = APIRouter(prefix="/collateral", tags=["collateral"])


@router.post("", response_model=CollateralResponse)
async def create_collateral(
    body: CollateralRequest,
    container: Container = Depends(container_dep),
) -> CollateralResponse:
    """Generate collateral and deliver it over the first channel that works."""
    try:
        content = await generate_collateral_text(
            container.content, body.topic, body.format, container.corpus.current
        )
    except ToolError as e:
        raise http_error(e) from e
    outcome = await container.delivery.deliver(
        DeliveryRequest(
            content=content,
            topic=body.topic,
            format=body.format,
            recipient=body.recipient_email,
        )
    )
    return CollateralResponse(
        channel=outcome.channel,
        message=outcome.message,
        reference=outcome.reference,
        attempts=outcome.attempts,
    )
