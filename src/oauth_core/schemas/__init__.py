"""Request, outcome and response schemas for the protocol entry points."""

from .oauth import (
    ApprovalDecision,
    AskApproval,
    AuthorizeAction,
    AuthorizeOutcome,
    AuthorizeRequest,
    Redirect,
    TokenRequest,
    TokenResponse,
)

__all__ = [
    "ApprovalDecision",
    "AskApproval",
    "AuthorizeAction",
    "AuthorizeOutcome",
    "AuthorizeRequest",
    "Redirect",
    "TokenRequest",
    "TokenResponse",
]
