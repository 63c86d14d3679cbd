import logging
from typing import Literal

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, Field

from ..core.config import AuthSettings
from .jwt_handler import create_access_token, decode_access_token

router = APIRouter(prefix="/auth")
logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

ABHA_PREFIX = "ABHA-"


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str
    role: str


class ABHALoginRequest(BaseModel):
    abhaId: str = Field(..., description="ABHA identifier, e.g. ABHA-1234")
    token: str


class User(BaseModel):
    username: str
    role: Literal["doctor", "admin"]
    abhaId: str | None = None


def get_auth_settings(request: Request) -> AuthSettings:
    return request.app.state.settings.auth


def authenticate_user(username: str, password: str) -> bool:
    # Demo login: any non-empty credentials are accepted
    return bool(username) and bool(password)


def authenticate_abha(abha_id: str, token: str) -> bool:
    return abha_id.startswith(ABHA_PREFIX) and bool(token)


@router.post("/login", response_model=TokenResponse)
async def login(
    username: str = Form(""),
    password: str = Form(""),
    role: Literal["doctor", "admin"] = Form("doctor"),
    settings: AuthSettings = Depends(get_auth_settings),
) -> TokenResponse:
    if not authenticate_user(username, password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Please enter both username and password")
    token = create_access_token(settings, subject=username, claims={"role": role})
    logger.info("user_login", extra={"role": role})
    return TokenResponse(access_token=token, username=username, role=role)


@router.post("/abha", response_model=TokenResponse)
async def login_with_abha(body: ABHALoginRequest, settings: AuthSettings = Depends(get_auth_settings)) -> TokenResponse:
    if not authenticate_abha(body.abhaId, body.token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid ABHA credentials")
    token = create_access_token(settings, subject=body.abhaId, claims={"role": "doctor", "abhaId": body.abhaId})
    logger.info("user_login", extra={"role": "doctor", "method": "abha"})
    return TokenResponse(access_token=token, username=body.abhaId, role="doctor")


async def get_current_user(
    token: str = Depends(oauth2_scheme), settings: AuthSettings = Depends(get_auth_settings)
) -> User:
    payload = decode_access_token(settings, token)
    return User(username=payload["sub"], role=payload.get("role", "doctor"), abhaId=payload.get("abhaId"))
