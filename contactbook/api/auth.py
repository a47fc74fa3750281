"""HTTP routes for registration, login and session identity."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, EmailStr, Field

from ..config import Settings
from ..domain.account import Account
from ..domain.contracts import RegisterAccountInput
from ..domain.service import AccountService
from ..security.gate import TOKEN_COOKIE, current_user_id, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class AccountResponse(BaseModel):
    """Serialised representation of an `Account`; the password hash is never included."""

    id: int
    username: str
    email: str
    nickname: str
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            nickname=account.nickname,
            created_at=account.created_at.isoformat(),
            updated_at=account.updated_at.isoformat(),
        )


class RegisterRequest(BaseModel):
    """Payload accepted when registering an account."""

    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    email: EmailStr
    nickname: str = Field(default="", max_length=50)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterResponse(BaseModel):
    message: str
    user: AccountResponse


class LoginResponse(BaseModel):
    message: str
    token: str
    user: AccountResponse


class MessageResponse(BaseModel):
    message: str


class CurrentUserResponse(BaseModel):
    user: AccountResponse


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    service: AccountService = Depends(get_service),
) -> RegisterResponse:
    """Register an account and return it without credentials."""
    account = service.register(
        RegisterAccountInput(
            username=payload.username,
            password=payload.password,
            email=payload.email,
            nickname=payload.nickname,
        )
    )
    return RegisterResponse(message="registration successful", user=AccountResponse.from_domain(account))


@router.post("/login", response_model=LoginResponse)
def login(
    response: Response,
    payload: LoginRequest,
    service: AccountService = Depends(get_service),
    settings: Settings = Depends(get_app_settings),
) -> LoginResponse:
    """Exchange credentials for a session token, also set as an HTTP-only cookie."""
    result = service.login(payload.username, payload.password)
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=result.token,
        max_age=settings.cookie_max_age,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
    )
    return LoginResponse(
        message="login successful",
        token=result.token,
        user=AccountResponse.from_domain(result.account),
    )


@router.post("/logout", response_model=MessageResponse, dependencies=[Depends(require_user)])
def logout(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> MessageResponse:
    """Tell the client to drop its session cookie; tokens are stateless."""
    logger.info("account %s logged out", current_user_id(request))
    response.delete_cookie(key=TOKEN_COOKIE, path="/", secure=settings.cookie_secure, httponly=True)
    return MessageResponse(message="logout successful")


@router.get("/me", response_model=CurrentUserResponse)
def me(
    user_id: str = Depends(require_user),
    service: AccountService = Depends(get_service),
) -> CurrentUserResponse:
    """Return the account behind the presented token."""
    return CurrentUserResponse(user=AccountResponse.from_domain(service.get_account(user_id)))
