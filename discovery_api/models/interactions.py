"""Interaction recording models."""

from typing import Optional

from pydantic import BaseModel, Field

from discovery.models import InteractionAction


class InteractionRequest(BaseModel):
    user_id: str
    content_id: str
    action: InteractionAction
    duration_seconds: Optional[float] = Field(None, ge=0)


class InteractionResponse(BaseModel):
    user_id: str
    content_id: str
    action: InteractionAction
    timestamp: str
