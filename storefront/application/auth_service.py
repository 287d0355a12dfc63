from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from passlib.context import CryptContext
from shared.core import get_logger
from storefront.core_settings import Settings
from storefront.domain.errors import AuthenticationError, ValidationError
from storefront.domain.models import AdminUser
from storefront.infrastructure.unit_of_work import UnitOfWork
from .schemas import AdminLogin, TokenResponse

logger = get_logger(__name__)

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

def hash_password(password: str) -> str:
    return _pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    return _pwd_context.verify(plain, hashed)

def create_access_token(subject: str, settings: Settings, role: str = "admin", **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def decode_access_token(token: str, settings: Settings) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except jwt.PyJWTError:
        return None

def token_subject(token: Optional[str], role: str, settings: Settings) -> str:
    """Return the ``sub`` of a valid bearer token issued for ``role``."""
    if not token:
        raise AuthenticationError("Missing token")
    payload = decode_access_token(token, settings)
    if not payload or payload.get("role") != role or not payload.get("sub"):
        raise AuthenticationError("Invalid token")
    return payload["sub"]

class AuthService:
    def __init__(self, uow: UnitOfWork, settings: Settings):
        self.uow = uow
        self.settings = settings

    def login(self, data: AdminLogin) -> TokenResponse:
        if not data.username or not data.password:
            raise ValidationError("Username and password are required")

        with self.uow as uow:
            admin = uow.admins.get_by_username(data.username)

        if not admin or not verify_password(data.password, admin.password_hash):
            logger.warning("Admin login rejected", extra={'extra_fields': {'username': data.username}})
            raise AuthenticationError("Invalid credentials")

        logger.info(f"Admin {admin.username} logged in")
        return TokenResponse(access_token=create_access_token(admin.username, self.settings))

    def authenticate(self, token: Optional[str]) -> str:
        """Return the admin username carried by a bearer token."""
        return token_subject(token, "admin", self.settings)

    def ensure_admin(self, username: str, password: str) -> AdminUser:
        """Create the bootstrap admin account unless it already exists."""
        with self.uow as uow:
            admin = uow.admins.get_by_username(username)
            if admin:
                return admin
            admin = uow.admins.add(AdminUser(username=username.lower(), password_hash=hash_password(password)))
            uow.commit()
        logger.info(f"Bootstrap admin {admin.username} created")
        return admin
