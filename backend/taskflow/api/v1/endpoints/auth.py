from fastapi import APIRouter, Depends, Request, status

from taskflow.api.deps import get_user_service
from taskflow.core.rate_limiter import auth_rate_limit
from taskflow.schemas.auth import UserRegister, UserLogin, LoginResponse, UserResponse, UserSummary
from taskflow.services.user_service import UserService


router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@auth_rate_limit()
async def register(
    request: Request,
    user_data: UserRegister,
    users: UserService = Depends(get_user_service)
):
    """Register new user"""
    user = await users.register(
        name=user_data.name,
        email=user_data.email,
        password=user_data.password
    )
    return UserResponse.from_model(user)


@router.post("/login", response_model=LoginResponse)
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    users: UserService = Depends(get_user_service)
):
    """Exchange email/password for a 24h access token"""
    token, user = await users.authenticate(credentials.email, credentials.password)
    return LoginResponse(access_token=token, user=UserSummary.from_model(user))
