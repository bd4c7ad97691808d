from datetime import datetime, timedelta, timezone

from fastapi import Depends, Header, HTTPException, Response, status
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from applications.user.models import User, UserStatus

ALGORITHM = "HS256"
NEW_ACCESS_TOKEN_HEADER = "X-New-Access-Token"
NEW_REFRESH_TOKEN_HEADER = "X-New-Refresh-Token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login_auth2/")


def token_claims(user: User) -> dict:
    return {"sub": str(user.id), "email": user.email, "role": user.role.value}


def create_access_token(data: dict):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_refresh_token(data: dict):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.REFRESH_SECRET_KEY, algorithm=ALGORITHM)


def issue_tokens(user: User) -> dict:
    claims = token_claims(user)
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
        "role": user.role.value,
    }


def decode_refresh_token(refresh_token: str) -> dict:
    try:
        payload = jwt.decode(refresh_token, settings.REFRESH_SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token expired. Please log in again.",
        )
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    if payload.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    return payload


async def get_current_user(
        response: Response,
        token: str = Depends(oauth2_scheme),
        refresh_token: str = Header(default=None, alias="refresh-token")
) -> User:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])

    except ExpiredSignatureError:
        if not refresh_token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Access token expired. Refresh token required.",
                headers={"WWW-Authenticate": "Bearer"},
            )

        refresh_payload = decode_refresh_token(refresh_token)
        payload = {"sub": refresh_payload.get("sub"), "refreshed": True}

    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type", "access") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid access token")

    user = await User.get_or_none(id=payload.get("sub"))
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=403, detail="Inactive user")

    if payload.get("refreshed"):
        # expired access token renewed from the refresh header; the client picks these up
        tokens = issue_tokens(user)
        response.headers[NEW_ACCESS_TOKEN_HEADER] = tokens["access_token"]
        response.headers[NEW_REFRESH_TOKEN_HEADER] = tokens["refresh_token"]

    return user
