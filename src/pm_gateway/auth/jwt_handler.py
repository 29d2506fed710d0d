"""JWT access-token creation and verification.

The token subject (`sub`) is the caller's wallet address; every engine
operation takes its caller identity from here. Tokens are issued by the
wallet-signature layer in front of this service; create_access_token exists
for that layer and for tests.

MVP NOTE: HS256 with one shared JWT_SECRET, no revocation. Tokens are valid
until expiry.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.pm_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(wallet: str) -> str:
    """Issue a short-lived access token for `wallet` (default: 30 min)."""
    now = datetime.now(UTC)
    payload = {
        "sub": wallet,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: bad signature, expired, or not an access token.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    return payload
