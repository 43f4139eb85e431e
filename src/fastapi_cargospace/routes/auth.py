"""Registration, login and user listing endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fastapi_cargospace.dependencies import get_workflow
from fastapi_cargospace.enums import UserRole
from fastapi_cargospace.schemas import (
    LoginRequest,
    RegisterUserRequest,
    UserResponse,
)
from fastapi_cargospace.workflow import BookingWorkflow

router = APIRouter(tags=["auth"])


@router.post("/auth/register", response_model=UserResponse, status_code=201)
async def register(
    body: RegisterUserRequest,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> UserResponse:
    user = await workflow.register_user(body)
    return UserResponse.from_user(user)


@router.post("/auth/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> UserResponse:
    """Log in by wallet address, email or username and password."""
    user = await workflow.login(body)
    return UserResponse.from_user(user)


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    role: UserRole | None = None,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> list[UserResponse]:
    users = await workflow.list_users(role=role)
    return [UserResponse.from_user(user) for user in users]
