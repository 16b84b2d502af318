"""
User Service - registration, credential checks and profile management
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    UserNotFoundError,
    ValidationError,
)
from taskflow.core.logging_config import logger
from taskflow.core.security import create_access_token, get_password_hash, verify_password
from taskflow.models.user import User


class UserService:
    """Users are only referenced by id from tasks; this is the one place that owns them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    async def get_or_404(self, user_id: str) -> User:
        user = await self.get(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def exists(self, user_id: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == str(user_id)))
        return result.scalar_one_or_none() is not None

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.name))
        return list(result.scalars().all())

    async def register(self, name: str, email: str, password: str) -> User:
        email = email.lower()
        if await self.get_by_email(email):
            logger.log_auth_event(event="register", success=False, user_email=email,
                                  reason="Email already registered")
            raise EmailAlreadyRegisteredError(email)

        user = User(name=name.strip(), email=email, hashed_password=get_password_hash(password))
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.log_auth_event(event="register", success=True, user_email=email)
        return user

    async def authenticate(self, email: str, password: str) -> tuple:
        """Return (access_token, user) for a valid email/password pair"""
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.log_auth_event(event="login", success=False, user_email=email,
                                  reason="Invalid credentials")
            raise InvalidCredentialsError()

        token = create_access_token({"sub": str(user.id)})
        logger.log_auth_event(event="login", success=True, user_email=user.email)
        return token, user

    async def update_profile(self, user_id: str, name: Optional[str] = None,
                             email: Optional[str] = None) -> User:
        user = await self.get_or_404(user_id)

        if name is None and email is None:
            raise ValidationError("No fields to update")

        if email is not None:
            email = email.lower()
            if email != user.email and await self.get_by_email(email):
                raise EmailAlreadyRegisteredError(email)
            user.email = email

        if name is not None:
            user.name = name.strip()

        await self.db.commit()
        await self.db.refresh(user)
        return user
