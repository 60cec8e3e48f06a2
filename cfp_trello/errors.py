"""
Error taxonomy for CFP to Trello.
Every failure surfaced by the import and publish pipelines is one of these.
"""

from typing import Optional


class CFPTrelloError(Exception):
    """Base class for all CFP to Trello errors."""


class InvalidInputError(CFPTrelloError):
    """Input rejected before any remote call (missing organization, category...)."""


class AuthError(CFPTrelloError):
    """Trello authorization was denied, timed out or could not be completed."""


class NotFoundError(CFPTrelloError):
    """A remote object looked up by name does not exist."""


class RemoteError(CFPTrelloError):
    """A remote call failed. Keeps the HTTP status and response body for diagnostics."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    def __str__(self) -> str:
        message = super().__str__()
        if self.status_code is not None:
            message = f"{message} (HTTP {self.status_code})"
        return message
