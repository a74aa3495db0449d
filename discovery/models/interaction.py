"""
Interaction model: one user action on a content item.

Append-only ground truth for exclusion and personalization. The history read
joins the content's topics and domain so the analyzer needs no extra lookups.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discovery.utils.time import parse_timestamp, utc_now


class InteractionAction(str, Enum):
    LIKE = "like"
    SKIP = "skip"
    SAVE = "save"
    SHARE = "share"
    VIEW = "view"


class Interaction(BaseModel):
    """
    A single user interaction.

    topics/domain: denormalized from the content at read time (empty when unknown).
    duration_seconds: optional time on page.
    """

    model_config = ConfigDict(extra="allow")

    user_id: str
    content_id: str
    action: InteractionAction
    timestamp: datetime = Field(default_factory=utc_now)
    duration_seconds: Optional[float] = None
    topics: List[str] = Field(default_factory=list)
    domain: str = ""

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_time(cls, v):
        return parse_timestamp(v) or utc_now()

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("topics", mode="before")
    @classmethod
    def normalize_topics(cls, v):
        return [str(t).strip().lower() for t in (v or []) if str(t).strip()]


def ensure_interactions(
    items: List[Union[Dict[str, Any], "Interaction"]],
) -> List["Interaction"]:
    """Convert list of dicts or Interactions to Interaction models for the pipeline."""
    return [
        Interaction.model_validate(i) if isinstance(i, dict) else i
        for i in items
    ]
