"""Expose constructed client wrappers."""

from .token_endpoint import AnthropicOAuthClient, TokenEndpointError

__all__ = [
    "AnthropicOAuthClient",
    "TokenEndpointError",
]
