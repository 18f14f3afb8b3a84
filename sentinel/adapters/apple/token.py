"""
Apple Maps token issuer for Sentinel.

This module signs short-lived ES256 JWTs for the Apple Maps Server API
from MapKit credentials, implementing TokenProviderPort.
"""

import time
from typing import Callable, Optional
import jwt
from sentinel.observability.logging_setup import get_logger

log = get_logger("sentinel.apple_token")

# re-sign this many seconds before the cached token expires
REFRESH_MARGIN_SEC = 60

class AppleMapsTokenProvider:
    """Signs and caches MapKit JWTs"""

    def __init__(self,
                 team_id: Optional[str] = None,
                 key_id: Optional[str] = None,
                 private_key: Optional[str] = None,
                 *,
                 static_token: Optional[str] = None,
                 ttl_sec: int = 30 * 60,
                 clock: Callable[[], float] = time.time):
        """
        Args:
            team_id: Apple developer team id (JWT iss)
            key_id: MapKit key id (JWT kid header)
            private_key: PEM encoded P-256 private key; literal "\\n" sequences are accepted
            static_token: Pre-issued token returned as-is when set
            ttl_sec: Lifetime of signed tokens
            clock: Unix time source
        """
        self.team_id = team_id
        self.key_id = key_id
        self.private_key = private_key.replace("\\n", "\n") if private_key else None
        self.static_token = static_token
        self.ttl = ttl_sec
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0.0

    @property
    def configured(self) -> bool:
        return bool(self.static_token or (self.team_id and self.key_id and self.private_key))

    async def get_token(self) -> Optional[str]:
        if self.static_token:
            return self.static_token
        if not (self.team_id and self.key_id and self.private_key):
            log.warning("missing Apple MapKit credentials")
            return None

        now = self._clock()
        if self._token and now < self._expires_at - REFRESH_MARGIN_SEC:
            return self._token

        issued = int(now)
        try:
            token = jwt.encode(
                {"iss": self.team_id, "iat": issued, "exp": issued + self.ttl},
                self.private_key,
                algorithm="ES256",
                headers={"kid": self.key_id},
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            log.error(f"failed to sign Apple Maps token: {e!r}")
            return None

        self._token = token
        self._expires_at = issued + self.ttl
        return token
