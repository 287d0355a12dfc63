"""Customer accounts: registration, login and the profile of the signed-in user.

Accounts are optional for checkout; orders carry their own customer snapshot.
"""

from typing import Optional
from shared.core import get_logger
from storefront.core_settings import Settings
from storefront.domain.errors import AuthenticationError, BusinessRuleError, NotFoundError
from storefront.domain.models import User
from storefront.infrastructure.unit_of_work import UnitOfWork
from .auth_service import hash_password, verify_password, create_access_token, token_subject
from .schemas import UserRegister, UserLogin, UserUpdate, UserSession, UserRead

logger = get_logger(__name__)

CUSTOMER_ROLE = "user"
PROFILE_FIELDS = ("first_name", "last_name", "phone", "address")

class CustomerService:
    def __init__(self, uow: UnitOfWork, settings: Settings):
        self.uow = uow
        self.settings = settings

    def _session(self, user: User) -> UserSession:
        token = create_access_token(user.id, self.settings, role=CUSTOMER_ROLE, email=user.email)
        return UserSession(access_token=token, user=UserRead.model_validate(user))

    def register(self, data: UserRegister) -> UserSession:
        email = data.email.strip().lower()
        with self.uow as uow:
            if uow.users.get_by_email(email):
                raise BusinessRuleError("User already exists")
            user = uow.users.add(User(
                first_name=data.first_name.strip(),
                last_name=data.last_name.strip(),
                email=email,
                password_hash=hash_password(data.password),
                phone=data.phone,
            ))
            uow.commit()
        logger.info(f"User {user.id} registered")
        return self._session(user)

    def login(self, data: UserLogin) -> UserSession:
        with self.uow as uow:
            user = uow.users.get_by_email(data.email)

        if not user or not verify_password(data.password, user.password_hash):
            logger.warning("User login rejected", extra={'extra_fields': {'email': data.email}})
            raise AuthenticationError("Invalid credentials")

        logger.info(f"User {user.id} logged in")
        return self._session(user)

    def authenticate(self, token: Optional[str]) -> str:
        """Return the user id carried by a customer bearer token."""
        return token_subject(token, CUSTOMER_ROLE, self.settings)

    def profile(self, user_id: str) -> User:
        with self.uow as uow:
            user = uow.users.get(user_id)
            if not user:
                raise NotFoundError("User not found")
            return user

    def update_profile(self, user_id: str, data: UserUpdate) -> User:
        changes = data.model_dump(include=set(PROFILE_FIELDS))
        with self.uow as uow:
            user = uow.users.get(user_id)
            if not user:
                raise NotFoundError("User not found")
            for field, value in changes.items():
                if value and value.strip():
                    setattr(user, field, value.strip())
            uow.commit()
        logger.info(f"User {user_id} updated profile")
        return user
