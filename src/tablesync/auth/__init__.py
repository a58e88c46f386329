"""Authentication module for the remote table service."""

from .token_provider import TokenProvider, RemoteToken

__all__ = ["TokenProvider", "RemoteToken"]
