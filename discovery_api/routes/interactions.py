"""Interaction recording: the feedback loop into history and exclusions."""

from fastapi import APIRouter, HTTPException

from discovery.errors import ContentNotFoundError, UpstreamUnavailableError

from ..models import InteractionRequest, InteractionResponse
from ..state import get_state

router = APIRouter()


@router.post("", response_model=InteractionResponse)
async def record_interaction(request: InteractionRequest):
    state = get_state()
    try:
        interaction = await state.discovery.record_interaction(
            request.user_id.strip(),
            request.content_id,
            request.action,
            request.duration_seconds,
        )
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UpstreamUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return InteractionResponse(
        user_id=interaction.user_id,
        content_id=interaction.content_id,
        action=interaction.action,
        timestamp=interaction.timestamp.isoformat(),
    )
