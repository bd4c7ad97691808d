from fastapi import APIRouter, Depends, Form, Header, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from app.deps import Services, get_services
from app.exceptions import ValidationError
from app.token import decode_refresh_token, issue_tokens
from applications.user.models import User, UserStatus
from applications.user.schemas import RegisterIn, serialize_user

router = APIRouter(tags=['Auth'])


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str


@router.post("/register/", status_code=status.HTTP_201_CREATED)
async def register(data: RegisterIn, services: Services = Depends(get_services)):
    user = await services.accounts.register(
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        phone=data.phone,
    )
    return {"user": serialize_user(user), **issue_tokens(user)}


@router.post("/login_auth2/", response_model=TokenResponse)
async def login_auth2(
    form_data: OAuth2PasswordRequestForm = Depends(),
    services: Services = Depends(get_services),
):
    # swagger's authorize form sends the email as username
    try:
        user = await services.accounts.authenticate(form_data.username, form_data.password)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return issue_tokens(user)


@router.post("/login/")
async def login(
    email: str = Form(...),
    password: str = Form(...),
    services: Services = Depends(get_services),
):
    try:
        user = await services.accounts.authenticate(email, password)
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return {"user": serialize_user(user), **issue_tokens(user)}


@router.post("/refresh/", response_model=TokenResponse)
async def refresh(refresh_token: str = Header(..., alias="refresh-token")):
    payload = decode_refresh_token(refresh_token)
    user = await User.get_or_none(id=payload.get("sub"))
    if not user or user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    return issue_tokens(user)
