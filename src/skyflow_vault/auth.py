"""Bearer token providers.

A token provider is any zero-argument callable returning a bearer token.
The client calls it once per operation.
"""

from __future__ import annotations

import logging
import os

from .errors import MissingTokenProviderError, TokenProviderError
from .models import TokenProvider

logger = logging.getLogger(__name__)


def static_token_provider(token: str) -> TokenProvider:
    def provider() -> str:
        return token

    return provider


def env_token_provider(var: str = "SKYFLOW_BEARER_TOKEN") -> TokenProvider:
    """Read the bearer token from an environment variable on each call."""

    def provider() -> str:
        token = os.environ.get(var)
        if not token:
            raise TokenProviderError(f"{var} is not set")
        return token

    return provider


def fetch_token(provider: TokenProvider | None, tag: str) -> str:
    """Call ``provider`` and wrap any failure in TokenProviderError."""
    if provider is None:
        logger.error("%s: token provider is not configured", tag)
        raise MissingTokenProviderError(f"{tag}: token provider is not configured")
    try:
        token = provider()
    except TokenProviderError:
        logger.error("%s: token provider failed", tag)
        raise
    except Exception as e:
        logger.error("%s: token provider failed", tag)
        raise TokenProviderError(f"{tag}: could not obtain bearer token: {e}") from e
    if not isinstance(token, str) or not token:
        logger.error("%s: token provider returned an empty token", tag)
        raise TokenProviderError(f"{tag}: token provider returned an empty token")
    return token
