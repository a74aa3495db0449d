"""
UserAffinity: a user's recent interaction history reduced to weight maps.

Lookups are neutral (0.5) for anything without history, so a cold-start user
composes multiplicatively with the other signals without penalty.
"""

from typing import Dict

from pydantic import BaseModel, Field


class UserAffinity(BaseModel):
    liked_topics: Dict[str, float] = Field(default_factory=dict)
    disliked_topics: Dict[str, float] = Field(default_factory=dict)
    liked_domains: Dict[str, float] = Field(default_factory=dict)
    # Exposure counts (every action, views included) for high-wildness novelty.
    seen_topics: Dict[str, int] = Field(default_factory=dict)
    seen_domains: Dict[str, int] = Field(default_factory=dict)
    interaction_count: int = 0

    @property
    def is_cold_start(self) -> bool:
        return not self.liked_topics and not self.disliked_topics and not self.liked_domains

    @classmethod
    def neutral(cls) -> "UserAffinity":
        return cls()
