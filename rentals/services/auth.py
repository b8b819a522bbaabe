"""
Authentication service for sign-up, login, token management and password reset.
Handles JWT token generation and validation, OAuth account linking and reset tokens.
"""

from typing import Optional, Tuple
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from jose import JWTError, ExpiredSignatureError
from rentals.config import Settings, get_settings
from rentals.models.activity import ActivityType
from rentals.models.user import User, UserRole
from rentals.repositories.user import UserRepository
from rentals.repositories.password_reset import PasswordResetRepository
from rentals.schemas.auth import RegisterRequest
from rentals.services.activity import ActivityService
from rentals.services.oauth import GoogleProfile
from rentals.utils.auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
    generate_reset_token
)
from rentals.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    NotFoundError,
    ValidationError,
    DuplicateResourceError
)
from rentals.utils.mailer import send_email, EmailSendError
import uuid
import logging

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists with this email, you will receive a password reset link."


class AuthService:
    """
    Authentication service for managing accounts, sessions and credentials.
    """

    def __init__(self, db_session: AsyncSession, settings: Optional[Settings] = None):
        self.db = db_session
        self.settings = settings or get_settings()
        self.user_repo = UserRepository(db_session)
        self.reset_repo = PasswordResetRepository(db_session)
        self.activity = ActivityService(db_session)

    async def register(self, data: RegisterRequest) -> User:
        """
        Create a credential account with role USER.

        Raises:
            DuplicateResourceError: If the email is already registered
            ValidationError: If the email or password is invalid
        """
        if await self.user_repo.get_by_email(data.email):
            raise DuplicateResourceError("User", data.email)

        try:
            user = await self.user_repo.create_user({
                "email": data.email,
                "name": data.name,
                "password": data.password,
                "role": UserRole.USER,
            })
        except ValueError as e:
            raise ValidationError(str(e))

        await self.activity.log(
            ActivityType.USER_CREATED,
            f"User {user.email} signed up",
            {"user_id": str(user.id), "provider": "credentials"},
        )
        return user

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            ValidationError: If input is missing
            InvalidCredentialsError: If credentials are invalid or the account has no password
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")

        if not password:
            raise ValidationError("Password is required")

        user = await self.user_repo.authenticate_user(email, password)

        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        return user

    def create_tokens(self, user: User) -> Tuple[str, str]:
        """
        Create access and refresh tokens for user.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        access_token = create_access_token(user_id=user.id, email=user.email, role=user.role)
        refresh_token = create_refresh_token(user_id=user.id, email=user.email)
        return access_token, refresh_token

    async def login(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate user and create tokens.

        Returns:
            Tuple of (user, access_token, refresh_token)
        """
        user = await self.authenticate_user(email, password)
        access_token, refresh_token = self.create_tokens(user)
        return user, access_token, refresh_token

    async def login_with_google(self, profile: GoogleProfile) -> Tuple[User, str, str]:
        """
        Sign in with a verified Google profile.

        New accounts are created with role USER and a verified email;
        existing accounts get their name and image refreshed.
        """
        user = await self.user_repo.get_by_email(profile.email)

        if user is None:
            user = await self.user_repo.create_user({
                "email": profile.email,
                "name": profile.name,
                "image": profile.picture,
                "role": UserRole.USER,
                "email_verified_at": datetime.now(timezone.utc),
            })
            logger.info(f"Created user {user.id} from Google sign-in")
            await self.activity.log(
                ActivityType.USER_CREATED,
                f"User {user.email} signed up with Google",
                {"user_id": str(user.id), "provider": "google"},
            )
        else:
            if not user.is_active:
                raise InactiveUserError()
            changes = {}
            if profile.name:
                changes["name"] = profile.name
            if profile.picture:
                changes["image"] = profile.picture
            if user.email_verified_at is None:
                changes["email_verified_at"] = datetime.now(timezone.utc)
            if changes:
                user = await self.user_repo.update(user, changes)

        access_token, refresh_token = self.create_tokens(user)
        return user, access_token, refresh_token

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Create new access token from refresh token.

        Raises:
            InvalidTokenError: If refresh token is invalid
            TokenExpiredError: If refresh token is expired
            InactiveUserError: If user account is inactive
        """
        try:
            token_payload = verify_token(refresh_token, token_type="refresh")
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise InvalidTokenError(str(e))

        user = await self._get_token_user(token_payload.user_id)
        return create_access_token(user_id=user.id, email=user.email, role=user.role)

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Raises:
            InvalidTokenError: If token is invalid or its user is gone
            TokenExpiredError: If token is expired
            InactiveUserError: If user account is inactive
        """
        try:
            token_payload = verify_token(token, token_type="access")
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise InvalidTokenError(str(e))

        return await self._get_token_user(token_payload.user_id)

    async def _get_token_user(self, user_id: str) -> User:
        try:
            user = await self.user_repo.get_by_id(uuid.UUID(user_id))
        except ValueError:
            raise InvalidTokenError("Invalid token subject")

        if user is None:
            raise InvalidTokenError("User no longer exists")

        if not user.is_active:
            raise InactiveUserError()

        return user

    async def get_user_by_id(self, user_id: uuid.UUID) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    async def request_password_reset(self, email: str) -> str:
        """
        Issue a reset token and email the link.

        The returned message is the same whether or not the account exists.
        Without SMTP configuration the link is written to the log.
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return RESET_REQUESTED_MESSAGE

        token = generate_reset_token()
        await self.reset_repo.create({
            "token": token,
            "user_id": user.id,
            "expires_at": datetime.now(timezone.utc) + timedelta(minutes=self.settings.password_reset_expire_minutes),
            "used": False,
        })

        reset_link = f"{self.settings.app_url}/auth/reset-password?token={token}"
        body = (
            "You requested a password reset.\n\n"
            f"Open this link to choose a new password: {reset_link}\n\n"
            f"The link expires in {self.settings.password_reset_expire_minutes} minutes. "
            "If you did not request this, you can ignore this email."
        )

        if not self.settings.smtp_configured:
            logger.info(f"SMTP not configured; password reset link for user {user.id}: {reset_link}")
            return RESET_REQUESTED_MESSAGE

        try:
            await run_in_threadpool(send_email, self.settings, user.email, "Reset your password", body)
        except EmailSendError as e:
            logger.error(f"Could not send password reset email to user {user.id}: {e}")

        return RESET_REQUESTED_MESSAGE

    async def reset_password(self, token: str, new_password: str) -> User:
        """
        Set a new password with a valid reset token and consume the token.

        Raises:
            ValidationError: If the token is unknown, used or expired, or the password is too short
        """
        reset = await self.reset_repo.get_by_token(token)
        if reset is None or not reset.is_usable(datetime.now(timezone.utc)):
            raise ValidationError("Invalid or expired reset token")

        user = await self.get_user_by_id(reset.user_id)

        try:
            user = await self.user_repo.update_password(user, new_password)
        except ValueError as e:
            raise ValidationError(str(e))

        await self.reset_repo.update(reset, {"used": True})
        logger.info(f"Password reset completed for user {user.id}")
        return user
