"""Exceptions shared by the API client and page flows."""
from typing import Optional


class ApiError(Exception):
    """Raised when a backend request fails at the transport or server level."""

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        original: Optional[Exception] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.original = original
        super().__init__(message or f"Request failed (status={status_code})")

    @property
    def is_transport_error(self) -> bool:
        """True when no response was received at all."""
        return self.status_code is None

    def user_message(self, fallback: str) -> str:
        """Server-supplied message if there was one, else the fallback text."""
        return self.message or fallback


class InvalidTransitionError(Exception):
    """Raised when a flow is asked to enter a phase its transition table forbids."""
    pass
