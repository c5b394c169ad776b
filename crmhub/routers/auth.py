# crmhub/routers/auth.py
import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from crmhub.config.settings import Settings
from crmhub.database import get_db
from crmhub.models.user import User
from crmhub.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse, RegisterRequest
from crmhub.schemas.common import MessageResponse
from crmhub.schemas.user import PermissionsOut, UserBasic, UserOut
from crmhub.services import authenticator
from crmhub.services.policy import Principal, allowed_operations
from crmhub.utils.auth import get_current_user, get_principal, get_settings
from crmhub.utils.security import create_session_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# Only mounted when running in development
dev_router = APIRouter(tags=["dev"])


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = authenticator.register(
        db,
        settings,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return {"message": "User registered successfully", "user": user}


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = authenticator.authenticate(db, settings, payload.email, payload.password)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user, settings),
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    logger.info("User %s logged in", user.id)
    return {"message": "Login successful", "user": user}


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return {"message": "Logged out successfully"}


@router.get("/user", response_model=UserOut)
def current_user_info(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/user/permissions", response_model=PermissionsOut)
def current_user_permissions(principal: Principal = Depends(get_principal)):
    """Role-derived operations, for the client to show or hide controls"""
    return {
        "role": principal.role,
        "operations": allowed_operations(principal),
        "team_member_ids": sorted(principal.team_member_ids),
    }


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    authenticator.change_password(
        db,
        settings,
        current_user,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return {"message": "Password changed successfully"}


@dev_router.get("/dev/users", response_model=List[UserBasic])
def dev_users(db: Session = Depends(get_db)):
    """Accounts to pick from on the development login screen"""
    return db.query(User).order_by(User.id).all()
