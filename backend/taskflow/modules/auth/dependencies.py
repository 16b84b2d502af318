from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from taskflow.core.database import get_db
from taskflow.core.exceptions import AuthenticationError, InvalidTokenError
from taskflow.core.logging_config import set_user_id
from taskflow.core.security import principal_from_token
from taskflow.models.user import User

# auto_error=False so a missing header goes through our 401 handler, not FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")

    user_id = principal_from_token(credentials.credentials)

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if not user:
        raise InvalidTokenError("User not found")

    set_user_id(str(user.id))
    request.state.user_id = str(user.id)
    return user


async def get_current_user_id(current_user: User = Depends(get_current_user)) -> str:
    return str(current_user.id)
