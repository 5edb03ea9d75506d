from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Protocol, Tuple
import hmac
import logging

import jwt
from pydantic import BaseModel, ConfigDict

from .config import settings
from .errors import InvalidCredentials, InvalidToken, MissingFields

logger = logging.getLogger(__name__)


SECRET_KEY = settings.JWT_SECRET_KEY
ALGORITHM = settings.JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_DAYS = settings.ACCESS_TOKEN_EXPIRE_DAYS


class AdminCredentials(BaseModel):
    """The configured admin identity, password included"""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    password: str
    role: str = "admin"


class AuthUser(BaseModel):
    """Identity carried by a bearer token; never holds a password"""

    id: str
    email: str
    name: str
    role: str = "user"


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {"email": "admin@example.com", "password": "change-me"}
        }


class AuthProvider(Protocol):
    """Capability that turns an email/password pair into an identity"""

    def authenticate(self, email: str, password: str) -> Optional[AuthUser]: ...

    def lookup(self, user_id: str) -> Optional[AuthUser]: ...


class ConfiguredAdminProvider:
    """AuthProvider backed by a single admin credential pair"""

    def __init__(self, credentials: AdminCredentials):
        self._credentials = credentials

    def _public_user(self) -> AuthUser:
        return AuthUser(**self._credentials.model_dump(exclude={"password"}))

    def authenticate(self, email: str, password: str) -> Optional[AuthUser]:
        email_ok = hmac.compare_digest(
            email.encode("utf-8"), self._credentials.email.encode("utf-8")
        )
        password_ok = hmac.compare_digest(
            password.encode("utf-8"), self._credentials.password.encode("utf-8")
        )
        if email_ok and password_ok:
            return self._public_user()
        return None

    def lookup(self, user_id: str) -> Optional[AuthUser]:
        if user_id == self._credentials.id:
            return self._public_user()
        return None


@lru_cache
def get_auth_provider() -> AuthProvider:
    """Auth provider built from process configuration"""
    return ConfiguredAdminProvider(
        AdminCredentials(
            id=settings.ADMIN_ID,
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
        )
    )


class AuthService:
    @staticmethod
    def create_access_token(
        user: AuthUser, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a signed JWT encoding the user's public identity"""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))

        to_encode = user.model_dump()
        to_encode.update({"iat": now, "exp": expire, "type": "access"})
        return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> AuthUser:
        """Verify a JWT and return the identity it carries

        Raises:
            InvalidToken: bad signature, malformed payload or expired token
        """
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except jwt.PyJWTError:
            raise InvalidToken()

        if payload.get("type") != "access":
            raise InvalidToken()

        try:
            return AuthUser(
                id=payload["id"],
                email=payload["email"],
                name=payload["name"],
                role=payload.get("role") or "user",
            )
        except (KeyError, ValueError):
            raise InvalidToken()

    @staticmethod
    def login(
        provider: AuthProvider, email: Optional[str], password: Optional[str]
    ) -> Tuple[AuthUser, str]:
        """Check credentials and issue a token

        Raises:
            MissingFields: email or password absent or blank
            InvalidCredentials: no exact match with the configured identity
        """
        if not email or not password:
            raise MissingFields()

        user = provider.authenticate(email, password)
        if user is None:
            logger.warning(f"Failed login attempt for {email}")
            raise InvalidCredentials()

        logger.info(f"Admin {user.email} logged in")
        return user, AuthService.create_access_token(user)
