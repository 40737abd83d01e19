"""
Password hashing and bearer-token handling.

``TokenCodec`` deliberately collapses every failure mode (bad signature,
non-HMAC algorithm, expiry, missing or malformed subject) into the same
``UnauthorizedError`` so callers cannot tell which check failed.  The
specific reason is only written to the log.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from mingle.config import HMAC_ALGORITHMS, Settings
from mingle.errors import UnauthorizedError
from mingle.models import MAX_ID

logger = logging.getLogger(__name__)

SUBJECT_CLAIM = "userId"
BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of a request."""

    user_id: int


class PasswordHasher:
    def __init__(self, rounds: int = 12) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            logger.warning("Stored password hash could not be parsed")
            return False


class TokenCodec:
    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=120)) -> None:
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported signing algorithm: {algorithm}")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            settings.JWT_SECRET,
            settings.JWT_ALGORITHM,
            timedelta(days=settings.TOKEN_TTL_DAYS),
        )

    def issue(self, user_id: int) -> str:
        expires = datetime.now(timezone.utc) + self._ttl
        claims = {SUBJECT_CLAIM: str(user_id), "exp": expires}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def subject(self, token: str) -> int:
        """Return the user id carried by *token* or raise ``UnauthorizedError``."""
        if not token:
            logger.info("Authentication failed: no token supplied")
            raise UnauthorizedError()
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=list(HMAC_ALGORITHMS),
                options={"require_exp": True},
            )
        except JWTError as exc:
            logger.info("Authentication failed: %s", exc)
            raise UnauthorizedError() from None

        raw_subject = claims.get(SUBJECT_CLAIM)
        if not isinstance(raw_subject, str) or not raw_subject.isdecimal():
            logger.info("Authentication failed: missing or malformed subject claim")
            raise UnauthorizedError()
        user_id = int(raw_subject)
        if user_id > MAX_ID:
            logger.info("Authentication failed: subject claim out of range")
            raise UnauthorizedError()
        return user_id


def bearer_token(header_value: str | None) -> str:
    """Strip an optional ``Bearer`` scheme from an Authorization header."""
    if not header_value:
        return ""
    value = header_value.strip()
    if value.lower().startswith(BEARER_PREFIX):
        return value[len(BEARER_PREFIX):].strip()
    return value
