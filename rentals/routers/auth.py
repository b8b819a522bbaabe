"""
Authentication API endpoints for sign-up, login, Google sign-in, token refresh and password reset.
"""

from fastapi import APIRouter, Depends, status
from rentals.config import Settings, get_settings
from rentals.models.user import User
from rentals.services.auth import AuthService
from rentals.services.oauth import GoogleOAuthService
from rentals.services.error_handler import error_responses
from rentals.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    GoogleLoginRequest,
    RefreshTokenRequest,
    AccessTokenResponse,
    LoginResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse
)
from rentals.schemas.user import UserResponse
from rentals.utils.dependencies import (
    get_auth_service,
    get_google_oauth_service,
    get_current_active_user
)


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _login_response(user: User, access_token: str, refresh_token: str, settings: Settings) -> LoginResponse:
    return LoginResponse(
        user=UserResponse.model_validate(user.to_dict()),
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Create a credential account with role USER",
    responses=error_responses(400, 409)
)
async def register(
    register_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.register(register_data)
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns JWT tokens",
    responses=error_responses(400, 401)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings)
) -> LoginResponse:
    """
    Authenticate user and return JWT tokens.

    Raises:
        InvalidCredentialsError: If credentials are invalid, the account is
            inactive or it only signs in with Google
    """
    user, access_token, refresh_token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )
    return _login_response(user, access_token, refresh_token, settings)


@router.post(
    "/oauth/google",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign in with Google",
    description="Verify a Google ID token, creating the account on first sign-in",
    responses=error_responses(400, 401, 403)
)
async def login_with_google(
    google_data: GoogleLoginRequest,
    oauth_service: GoogleOAuthService = Depends(get_google_oauth_service),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings)
) -> LoginResponse:
    profile = await oauth_service.verify_id_token(google_data.id_token)
    user, access_token, refresh_token = await auth_service.login_with_google(profile)
    return _login_response(user, access_token, refresh_token, settings)


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
    description="Generate new access token using refresh token",
    responses=error_responses(401, 403)
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings)
) -> AccessTokenResponse:
    access_token = await auth_service.refresh_access_token(refresh_data.refresh_token)

    return AccessTokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get current authenticated user information",
    responses=error_responses(401, 403)
)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user)
) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Request a password reset",
    description="Email a reset link. The response does not reveal whether the account exists"
)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    message = await auth_service.request_password_reset(request_data.email.lower())
    return MessageResponse(success=True, message=message)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Reset password",
    description="Set a new password with a token from the reset email",
    responses=error_responses(400)
)
async def reset_password(
    reset_data: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth_service.reset_password(reset_data.token, reset_data.password)
    return MessageResponse(success=True, message="Password has been reset")
