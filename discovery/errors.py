"""
Discovery errors.

Only true resource exhaustion (nothing left to serve) and a missing reference
item are escalated to callers. Signal fetch failures are absorbed into neutral
defaults by the service layer and never raise.
"""

from typing import Optional


class DiscoveryError(Exception):
    """Base class for discovery engine errors."""


class EmptyPoolError(DiscoveryError):
    """No candidate remains after exclusions, domain blocks, and widening."""

    def __init__(self, user_id: Optional[str], exclusion_count: int, attempts: int = 1):
        self.user_id = user_id
        self.exclusion_count = exclusion_count
        self.attempts = attempts
        super().__init__(
            f"No content left to discover for user {user_id!r} "
            f"(exclusions={exclusion_count}, fetch_attempts={attempts}). "
            "Broaden topics or raise wildness."
        )


class ContentNotFoundError(DiscoveryError):
    """Reference content id does not exist in the content store."""

    def __init__(self, content_id: str):
        self.content_id = content_id
        super().__init__(f"Content not found: {content_id}")


class UpstreamUnavailableError(DiscoveryError):
    """A required upstream read failed (exclusion history or content query).

    Serving without exclusions would break the no-repeat guarantee, so these
    reads are never degraded.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Upstream read failed during {operation}{detail}")
