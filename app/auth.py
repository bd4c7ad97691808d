from fastapi import Depends, HTTPException, status

from applications.user.models import User, UserRole
from .token import get_current_user


async def login_required(current_user: User = Depends(get_current_user)):
    return current_user


def role_required(*roles: UserRole):
    async def wrapper(
        current_user: User = Depends(get_current_user),
    ):
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied.",
            )
        return current_user
    return wrapper
