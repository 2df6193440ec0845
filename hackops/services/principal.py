"""
Principal resolver — turns an ``(email, authToken)`` pair into a verified
principal.

Tokens are signed JWTs issued by this service (``issue_token``) once the
external OTP flow has proven the email. Every call re-verifies signature,
expiry, subject and revocation; ``revoke`` is the logout teardown.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from hackops.config import settings
from hackops.errors import Unauthenticated, ValidationFailed
from hackops.models.revoked_token import RevokedToken
from hackops.utils.emails import normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    email: str
    token_id: str
    expires_at: datetime


def issue_token(email: str) -> str:
    """Create a signed JWT for ``email`` with an expiry and a unique id."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    claims = {
        "sub": normalize_email(email),
        "jti": uuid.uuid4().hex,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _invalid() -> Unauthenticated:
    return Unauthenticated("invalid_credentials", "Invalid email or auth token.")


def decode_token(email: str, auth_token: str) -> Principal:
    """Check signature, expiry and subject; revocation is not looked at here."""
    if not auth_token:
        raise _invalid()
    try:
        claimed = normalize_email(email)
    except ValidationFailed:
        raise _invalid() from None
    try:
        payload = jwt.decode(auth_token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise _invalid() from None

    if payload.get("sub") != claimed or not payload.get("jti") or "exp" not in payload:
        raise _invalid()
    expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    return Principal(email=claimed, token_id=payload["jti"], expires_at=expires_at)


class PrincipalResolver:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def resolve(self, email: str, auth_token: str) -> Principal:
        """Verify the pair or raise ``Unauthenticated``."""
        principal = decode_token(email, auth_token)
        async with self._session_factory() as db:
            revoked = await db.execute(
                select(RevokedToken.jti).where(RevokedToken.jti == principal.token_id)
            )
            if revoked.scalar_one_or_none() is not None:
                logger.warning(f"Rejected revoked token for {principal.email}")
                raise _invalid()
        return principal

    async def revoke(self, email: str, auth_token: str) -> Principal:
        """Resolve the pair, then make its token unusable for the rest of its life."""
        principal = await self.resolve(email, auth_token)
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    # Expired tokens already fail decode.
                    await db.execute(
                        delete(RevokedToken).where(
                            RevokedToken.expires_at < datetime.now(timezone.utc)
                        )
                    )
                    # Two concurrent logouts can both get past resolve().
                    existing = await db.get(RevokedToken, principal.token_id)
                    if existing is None:
                        db.add(
                            RevokedToken(
                                jti=principal.token_id,
                                email=principal.email,
                                expires_at=principal.expires_at,
                            )
                        )
        except IntegrityError:
            logger.info(f"Token for {principal.email} was revoked by a concurrent logout")
            return principal
        logger.info(f"Revoked token for {principal.email}")
        return principal
