# medmentor/services/errors.py
from __future__ import annotations

from typing import Optional


class AdvisorError(RuntimeError):
    """Base for every failure the advisor pipeline surfaces to a caller."""

    user_message = "Failed to get response from AI advisor"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.user_message)


class ConfigurationError(AdvisorError):
    pass


class RateLimited(AdvisorError):
    user_message = "Rate limit exceeded. Please try again in a moment."


class QuotaExhausted(AdvisorError):
    user_message = "AI credits depleted. Please add credits to continue."


class GatewayError(AdvisorError):
    """Non-2xx upstream reply other than 429/402."""

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__(f"AI API error: {status}")
        self.status = status
        self.body = body


class Unreachable(AdvisorError):
    """Transport-level failure (DNS, connect, reset, read error)."""


class CreateConversationFailed(AdvisorError):
    user_message = "Failed to create conversation"
