"""Auth API router: login, register, demo login, refresh, me."""

from typing import Optional

from fastapi import APIRouter, Depends

from buildsmart.core.security import get_current_user, get_current_user_optional
from buildsmart.repositories import Store, get_store
from buildsmart.schemas.schemas import (
    AuthResponse,
    CurrentUser,
    DemoLoginRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    to_user_out,
)
from buildsmart.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
async def login(body: LoginRequest, store: Store = Depends(get_store)):
    """Authenticate and return a JWT."""
    result = auth_service.authenticate(store, body.email, body.password)
    return AuthResponse(token=result["token"], user=to_user_out(result["user"]))


@router.post("/register", response_model=AuthResponse, status_code=201, response_model_exclude_none=True)
async def register(
    body: RegisterRequest,
    store: Store = Depends(get_store),
    caller: Optional[CurrentUser] = Depends(get_current_user_optional),
):
    """Register a new user. Only an Admin caller may pick a non-Worker role."""
    result = auth_service.register(
        store,
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        site=body.site,
        employee_id=body.employee_id,
        caller=caller,
    )
    return AuthResponse(token=result["token"], user=to_user_out(result["user"]))


@router.get("/me", response_model=UserResponse, response_model_exclude_none=True)
async def get_me(
    store: Store = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Current user profile, re-read from the store."""
    user = auth_service.get_profile(store, current_user)
    return UserResponse(user=to_user_out(user))


@router.post("/demo-login", response_model=AuthResponse, response_model_exclude_none=True)
async def demo_login(
    body: Optional[DemoLoginRequest] = None,
    store: Store = Depends(get_store),
):
    """Password-less login as a role's demo user (non-production only)."""
    result = auth_service.demo_login(store, body.role if body else None)
    return AuthResponse(
        token=result["token"],
        user=to_user_out(result["user"]),
        message="Demo login successful",
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    store: Store = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Issue a fresh token reflecting the caller's current role and permissions."""
    return TokenResponse(token=auth_service.refresh(store, current_user))
