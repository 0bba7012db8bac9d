"""Password hashing and bearer token utilities.

Passwords are hashed with bcrypt directly (salted, adaptive). Tokens are HS256
JWTs signed with the process-wide secret from Settings.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

import bcrypt
import pytz
from jose import jws, jwt
from jose.exceptions import ExpiredSignatureError, JWSError, JWSSignatureError, JWTError

from core.exceptions import ExpiredTokenError, InvalidSignatureError, MalformedTokenError
from schemas.user import Role, TokenClaims

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        password_bytes = password_bytes[:BCRYPT_MAX_BYTES]
    return password_bytes


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt with a fresh random salt.

    Args:
        password: Plain text password.
        rounds: bcrypt cost factor.

    Returns:
        Hashed password (bcrypt hash string).
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        plain_password: Plain text password to verify.
        hashed_password: Bcrypt hash string to verify against.

    Returns:
        True if password matches, False otherwise.
    """
    try:
        return bcrypt.checkpw(
            _password_bytes(plain_password), hashed_password.encode("utf-8")
        )
    except ValueError as e:
        # Stored value is not a bcrypt hash
        logger.error("Password verification error: %s", e)
        return False


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(self, secret: str, ttl_hours: int, algorithm: str = "HS256"):
        """Initialize TokenService.

        Args:
            secret: Symmetric signing secret shared by issuer and verifier.
            ttl_hours: Default token lifetime.
            algorithm: HMAC algorithm; tokens with any other alg are rejected.
        """
        if not algorithm.startswith("HS"):
            raise ValueError(f"Only HMAC algorithms are supported, got {algorithm}")
        self._secret = secret
        self.ttl_hours = ttl_hours
        self.algorithm = algorithm

    def issue(
        self,
        user_id: int,
        role: str,
        email: str,
        ttl_hours: Optional[int] = None,
    ) -> Tuple[str, datetime]:
        """Create a signed token for a user.

        Args:
            user_id: Subject id.
            role: Subject role.
            email: Subject email.
            ttl_hours: Optional lifetime overriding the default.

        Returns:
            The encoded token and its expiry instant (UTC).
        """
        issued_at = datetime.now(pytz.utc).replace(microsecond=0)
        hours = self.ttl_hours if ttl_hours is None else ttl_hours
        expires_at = issued_at + timedelta(hours=hours)
        claims = {
            "sub": str(user_id),
            "user_id": user_id,
            "role": role.value if isinstance(role, Role) else role,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret, algorithm=self.algorithm)
        return token, expires_at

    def verify(self, token: str) -> TokenClaims:
        """Verify a token and return its claims.

        Raises:
            MalformedTokenError: If the token cannot be decoded or lacks claims.
            InvalidSignatureError: If the algorithm or signature is wrong.
            ExpiredTokenError: If the token has expired.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise MalformedTokenError("token header cannot be decoded") from exc

        if header.get("alg") != self.algorithm:
            raise InvalidSignatureError(
                f"unexpected signing algorithm {header.get('alg')!r}"
            )

        try:
            jws.verify(token, self._secret, algorithms=[self.algorithm])
        except JWSSignatureError as exc:
            raise InvalidSignatureError("signature verification failed") from exc
        except JWSError as exc:
            # python-jose re-raises signature mismatches as a plain JWSError
            if "signature verification failed" in str(exc).lower():
                raise InvalidSignatureError("signature verification failed") from exc
            raise MalformedTokenError(str(exc)) from exc

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise ExpiredTokenError("token expired") from exc
        except JWTError as exc:
            raise MalformedTokenError(str(exc)) from exc

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise MalformedTokenError("token has no exp claim")
        expires_at = datetime.fromtimestamp(exp, tz=pytz.utc)
        # Checked again here so expiry never depends on library defaults
        if datetime.now(pytz.utc) >= expires_at:
            raise ExpiredTokenError("token expired")

        user_id = payload.get("user_id")
        role = Role.parse(payload.get("role"))
        if not isinstance(user_id, int) or role is None:
            raise MalformedTokenError("token is missing subject claims")

        return TokenClaims(
            user_id=user_id,
            role=role,
            email=payload.get("email"),
            expires_at=expires_at,
        )
