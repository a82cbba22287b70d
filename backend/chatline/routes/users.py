# backend/chatline/routes/users.py
"""
User routes.

Endpoints:
    POST /users/login   -> Login, registering unknown usernames
    GET /users/online   -> Users with a live realtime session
    GET /users/all      -> All registered users
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..dependencies import get_hub, get_user_service
from ..models.user import User
from ..schemas.user import LoginRequest, LoginResponse, UserListResponse, UserSummary
from ..services.messaging.hub import ConnectionHub
from ..services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    service: UserService = Depends(get_user_service),
) -> LoginResponse:
    """
    Log in with a username and password.

    An unknown username is registered on the spot; ``is_new_user`` tells the
    two cases apart. A wrong password for an existing user is a 400.
    """
    result = await service.login(payload.username, payload.password)
    return LoginResponse(
        user_id=result.user.id,
        user=UserSummary.model_validate(result.user),
        access_token=result.access_token,
        is_new_user=result.is_new_user,
    )


@router.get("/online", response_model=UserListResponse)
async def list_online_users(
    current_user: User = Depends(get_current_user),
    hub: ConnectionHub = Depends(get_hub),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    """Users that currently hold an open realtime connection."""
    users = await asyncio.to_thread(service.get_users_by_ids, hub.online_user_ids())
    return UserListResponse(users=[UserSummary.model_validate(user) for user in users])


@router.get("/all", response_model=UserListResponse)
def list_all_users(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    users = service.list_all_users()
    return UserListResponse(users=[UserSummary.model_validate(user) for user in users])
