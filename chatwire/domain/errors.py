"""Errors raised while building chat completion requests."""

from typing import Any, Dict, Optional


class ChatRequestError(Exception):
    """Base exception for request construction failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class HeaderBuildError(ChatRequestError):
    """Raised when a header name or value cannot be sent on the wire."""

    def __init__(self, name: str, value: str, reason: str):
        super().__init__(
            f"Invalid header {name!r}: {reason}",
            details={"header": name, "reason": reason},
        )
        self.name = name
        self.value = value
        self.reason = reason
