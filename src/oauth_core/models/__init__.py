"""Persisted record models."""

from .base import BaseModelConfig
from .oauth import (
    AccessToken,
    Approval,
    AuthorizationCode,
    Client,
    ClientType,
    RefreshToken,
)

__all__ = [
    "BaseModelConfig",
    "AccessToken",
    "Approval",
    "AuthorizationCode",
    "Client",
    "ClientType",
    "RefreshToken",
]
