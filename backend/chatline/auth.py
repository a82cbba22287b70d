# backend/chatline/auth.py
import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from jwt import PyJWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .core.config import settings
from .core.exceptions import authentication_error
from .database import get_db
from .models.user import User
from .repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds
)

# Dedicated thread pool for CPU-bound password operations
_password_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="bcrypt_")
bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        bool: True if password matches, False otherwise
    """
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except ValueError as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    return str(pwd_context.hash(password))


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    """
    Non-blocking password verification using thread pool.

    Runs bcrypt in a separate thread so the event loop keeps serving
    realtime connections while a login is being checked.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        _password_executor, verify_password, plain_password, hashed_password
    )


async def get_password_hash_async(password: str) -> str:
    """Non-blocking password hashing using thread pool."""
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(_password_executor, pwd_context.hash, password)
    return str(result)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: The data to encode in the token; ``sub`` carries the user id
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})

    encoded_jwt = cast(
        str,
        jwt.encode(to_encode, settings.secret_key.get_secret_value(), algorithm=settings.algorithm),
    )
    logger.info(f"Created access token for user: {data.get('sub')}")
    return encoded_jwt


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT access token. Raises PyJWTError when invalid or expired."""
    payload = jwt.decode(
        token,
        settings.secret_key.get_secret_value(),
        algorithms=[settings.algorithm],
    )
    return cast(Dict[str, Any], payload)


def user_from_token(db: Session, token: Optional[str]) -> User:
    """
    Resolve the user a bearer token belongs to.

    Raises:
        DomainException: AUTHENTICATION when the token is missing, invalid,
            expired, or names an unknown user
    """
    if not token:
        raise authentication_error("Authentication token is missing")
    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.info(f"Rejected access token: {str(e)}")
        raise authentication_error("Invalid or expired token")

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise authentication_error("Invalid or expired token")

    user = RepositoryFactory.create_user_repository(db).get_by_id(user_id)
    if user is None:
        raise authentication_error("User not found")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """FastAPI dependency for the authenticated user."""
    token = credentials.credentials if credentials else None
    return user_from_token(db, token)
