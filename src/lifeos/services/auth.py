"""Bearer token authentication port."""

from typing import Protocol
from uuid import UUID


class TokenVerifier(Protocol):
    """Resolves an access token to the id of the user it was issued to."""

    def verify(self, token: str) -> UUID | None:
        """Return the user id, or None when the token is invalid or expired."""
