"""
Token issuing port interface.

This module defines the protocol for the collaborator that hands out
bearer tokens for the Apple Maps Server API.
"""

from typing import Optional, Protocol

class TokenProviderPort(Protocol):
    """Bearer token source"""

    async def get_token(self) -> Optional[str]:
        """
        Return a usable bearer token.

        Returns:
            Token string, or None when no token can be obtained
        """
        ...
