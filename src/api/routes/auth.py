"""Authentication routes.

This module handles HTTP endpoints for user registration, local and GitHub
login, logout, and the bearer-token dependency shared by every other router.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.dependencies import GitHubClientDep, UserManagerDep
from core.exceptions import TrackerError, UnauthorizedError
from schemas.user import (
    CurrentUserResponse,
    GitHubTokenRequest,
    GitHubTokenResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    User,
    UserInfo,
    UserListResponse,
)
from utils.user_manager import UserAlreadyExistsError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])

# Missing headers are reported as 401 by get_current_user, not 403
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_manager: UserManagerDep = None,
) -> User:
    """Get current authenticated user.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent.
        user_manager: Injected UserManager instance.

    Returns:
        Current User object.

    Raises:
        HTTPException: 401 if the header is missing or the token is invalid,
            expired or superseded by a newer login.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return user_manager.authenticate(credentials.credentials)
    except UnauthorizedError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Get current user, rejecting anyone who is not an admin."""
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.post(
    "/users/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a local user",
)
def register(
    req: RegisterRequest,
    user_manager: UserManagerDep = None,
) -> dict:
    """Register a new local user with role "user".

    Raises:
        HTTPException: 409 if the email is already registered.
    """
    try:
        user = user_manager.create_user(
            name=req.name,
            email=req.email,
            password=req.password,
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return {
        "message": "User registered successfully",
        "user_id": user.user_id,
    }


@router.post("/users/login", response_model=LoginResponse, summary="Local login")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep = None,
) -> LoginResponse:
    """Login with email and password.

    A successful login revokes any token issued earlier for the account.

    Raises:
        HTTPException: 401 if the credentials are wrong.
    """
    try:
        user, token = user_manager.login(req.email, req.password)
    except UnauthorizedError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return LoginResponse(user=UserInfo.from_user(user), token=token)


@router.post("/users/logout", summary="Revoke the current token")
def logout(
    current_user: User = Depends(get_current_user),
    user_manager: UserManagerDep = None,
) -> dict:
    user_manager.revoke_token(current_user.user_id)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/users/me", response_model=CurrentUserResponse, summary="Current user")
def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserInfo.from_user(current_user))


@router.get("/users", response_model=UserListResponse, summary="List users")
def list_users(
    admin: User = Depends(require_admin),
    user_manager: UserManagerDep = None,
) -> UserListResponse:
    """List all users so the admin can pick a chat recipient."""
    users = user_manager.list_users()
    return UserListResponse(users=[UserInfo.from_user(u) for u in users])


@router.post(
    "/github/token",
    response_model=GitHubTokenResponse,
    summary="Exchange a GitHub OAuth code",
)
def github_token(
    req: GitHubTokenRequest,
    github_client: GitHubClientDep,
    user_manager: UserManagerDep = None,
) -> GitHubTokenResponse:
    """Exchange a GitHub authorization code for a local session.

    Resolves the GitHub identity to a local account (by GitHub id, then by
    verified primary email, else a new account) and issues the same kind of
    token as a local login.

    Raises:
        HTTPException: 500 if any step of the exchange fails.
    """
    try:
        access_token = github_client.exchange_code(req.code)
        profile = github_client.fetch_profile(access_token)
        primary_email = github_client.fetch_primary_email(access_token)
        user, token = user_manager.resolve_github_user(profile, primary_email)
    except TrackerError as e:
        logger.warning("GitHub token exchange failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to exchange code for token",
        )

    return GitHubTokenResponse(access_token=token, user=UserInfo.from_user(user))
