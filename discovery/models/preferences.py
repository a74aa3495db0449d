"""User preference profile: stated topics, wildness dial, blocked domains."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_WILDNESS = 35


def clamp_wildness(value) -> int:
    """Clamp any numeric wildness into [0, 100]; None and NaN become the default."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return DEFAULT_WILDNESS
    if v != v:
        return DEFAULT_WILDNESS
    return int(round(min(100.0, max(0.0, v))))


class UserPreferences(BaseModel):
    model_config = ConfigDict(extra="allow")

    user_id: str
    topics: List[str] = Field(default_factory=list)
    wildness: int = DEFAULT_WILDNESS
    blocked_domains: List[str] = Field(default_factory=list)

    @field_validator("wildness", mode="before")
    @classmethod
    def clamp(cls, v):
        return clamp_wildness(v)

    @field_validator("topics", "blocked_domains", mode="before")
    @classmethod
    def normalize(cls, v):
        return [str(t).strip().lower() for t in (v or []) if str(t).strip()]

    @classmethod
    def default_for(cls, user_id: str) -> "UserPreferences":
        """Profile used when the preference store has nothing (or fails)."""
        return cls(user_id=user_id)
