"""Short-lived token presented to the agreement page while rendering."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from agreements_pdf.errors import ConfigurationError

AUTH_HEADER = "x-encrypted-auth"
TOKEN_ALGORITHM = "HS256"


def mint_auth_token(
    secret: Optional[str],
    *,
    source: str = "defra",
    ttl_seconds: int = 300,
    now: Optional[datetime] = None,
) -> str:
    """Sign an HS256 JWT carrying the fixed ``source`` claim."""
    if not secret:
        raise ConfigurationError("AGREEMENTS_JWT_SECRET is not configured")
    issued_at = now or datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "source": source,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)
