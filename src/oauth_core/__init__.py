"""OAuth2 authorization server core: authorize, approve and token endpoints."""

__version__ = "0.1.0"
