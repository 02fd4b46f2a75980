"""Session tokens, password hashing and the session cookie.

Tokens are stateless HS256 JWTs held by the client in the `session` cookie.
They carry identity only; admin rights are looked up on every request.
There is no server side revocation: logging out only tells the client to drop
the cookie, a copied token stays valid until it expires.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import bcrypt
import jwt
from fastapi import Response

from dailyposts.core.errors import ExpiredTokenError, InvalidTokenError, WrongAlgorithmError
from dailyposts.core.mapper import RecordMapper
from dailyposts.models.user import AdminFlag

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_COOKIE = "session"
CLAIMS_KEY = "CustomClaims"


def hash_password(password: str) -> bytes:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt())


def check_password(password: str, hashed: bytes) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed)
    except ValueError:
        # malformed hash in the database
        return False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionTokenService:
    def __init__(
        self,
        signing_key: str,
        lifetime: timedelta,
        mapper: RecordMapper,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._key = signing_key
        self.lifetime = lifetime
        self.mapper = mapper
        self._clock = clock

    def issue(self, claims: dict[str, Any]) -> str:
        now = self._clock()
        payload = {
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
            CLAIMS_KEY: dict(claims),
        }
        return jwt.encode(payload, self._key, algorithm=ALGORITHM)

    def verify(self, token: str) -> int:
        """Check a session token and return the user id it was issued for."""
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"malformed session token: {e}") from e

        if header.get("alg") != ALGORITHM:
            raise WrongAlgorithmError(f"unexpected signing algorithm: {header.get('alg')!r}")

        try:
            payload = jwt.decode(
                token,
                self._key,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError("session token expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"invalid session token: {e}") from e

        uid = (payload.get(CLAIMS_KEY) or {}).get("uid")
        if not isinstance(uid, int) or isinstance(uid, bool):
            raise InvalidTokenError("session token carries no user id")
        return uid

    def is_admin(self, uid: int) -> bool:
        flags = self.mapper.select(AdminFlag, "users", "uid = ? LIMIT 1", uid)
        if len(flags) != 1:
            logger.debug(f"is_admin: unknown user {uid}")
            return False
        return flags[0].admin

    def set_session_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            SESSION_COOKIE,
            token,
            max_age=int(self.lifetime.total_seconds()),
            httponly=True,
            samesite="strict",
        )


def clear_session_cookie(response: Response) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        "",
        expires=datetime(1970, 1, 1, tzinfo=timezone.utc),
        httponly=True,
        samesite="strict",
    )
