"""
Tests for service classes.
Tests business logic, authentication, authorization, and service interactions.
"""

import pytest
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch
from sqlalchemy import select, func

from rentals.config import Settings
from rentals.models.activity import Activity, ActivityType
from rentals.models.listing import Listing, ListingStatus
from rentals.models.notification import Notification
from rentals.models.password_reset import PasswordReset
from rentals.models.report import Report, ReportStatus
from rentals.models.user import User, UserRole
from rentals.schemas.auth import RegisterRequest
from rentals.schemas.listing import ListingCreate, ListingUpdate, AdminListingUpdate
from rentals.schemas.report import ReportCreate
from rentals.schemas.user import ProfileUpdate
from rentals.services.admin import AdminService
from rentals.services.auth import AuthService, RESET_REQUESTED_MESSAGE
from rentals.services.favorite import FavoriteService
from rentals.services.listing import ListingService
from rentals.services.notification import NotificationService
from rentals.services.oauth import GoogleProfile
from rentals.services.report import ReportService
from rentals.services.user import UserService
from rentals.utils.auth import create_access_token, create_refresh_token
from rentals.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateResourceError,
    InactiveUserError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenExpiredError,
    ValidationError
)
from tests.conftest import UserFactory, ListingFactory


class TestAuthService:
    """Test AuthService functionality."""

    async def test_register_creates_user(self, auth_service: AuthService, db_session):
        user = await auth_service.register(
            RegisterRequest(email="New@Example.com", name="New Renter", password="securepassword123")
        )
        assert user.email == "new@example.com"
        assert user.role == UserRole.USER
        assert user.verify_password("securepassword123")

        logged = await db_session.execute(select(Activity).where(Activity.type == ActivityType.USER_CREATED))
        assert logged.scalars().first() is not None

    async def test_register_duplicate_email(self, auth_service: AuthService, test_user: User):
        with pytest.raises(DuplicateResourceError):
            await auth_service.register(
                RegisterRequest(email=test_user.email, name="Copy", password="securepassword123")
            )

    async def test_authenticate_user_success(self, auth_service: AuthService, test_user: User):
        user = await auth_service.authenticate_user(test_user.email, "testpassword123")
        assert user.id == test_user.id

    async def test_authenticate_user_invalid_credentials(self, auth_service: AuthService, test_user: User):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.authenticate_user(test_user.email, "wrongpassword")

    async def test_authenticate_user_inactive(self, auth_service: AuthService, test_inactive_user: User):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.authenticate_user(test_inactive_user.email, "testpassword123")

    async def test_authenticate_user_empty_email(self, auth_service: AuthService):
        with pytest.raises(ValidationError, match="Email is required"):
            await auth_service.authenticate_user("", "password")

    async def test_login_returns_tokens(self, auth_service: AuthService, test_user: User):
        user, access_token, refresh_token = await auth_service.login(test_user.email, "testpassword123")
        assert user.id == test_user.id
        assert (await auth_service.get_current_user(access_token)).id == test_user.id
        assert await auth_service.refresh_access_token(refresh_token)

    async def test_get_current_user_expired_token(self, auth_service: AuthService, test_user: User):
        token = create_access_token(test_user.id, test_user.email, test_user.role, expires_delta=timedelta(seconds=-5))
        with pytest.raises(TokenExpiredError):
            await auth_service.get_current_user(token)

    async def test_refresh_token_rejected_as_access_token(self, auth_service: AuthService, test_user: User):
        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user(create_refresh_token(test_user.id, test_user.email))

    async def test_token_for_deleted_user(self, auth_service: AuthService):
        token = create_access_token(uuid.uuid4(), "ghost@example.com", UserRole.USER)
        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user(token)

    async def test_token_for_inactive_user(self, auth_service: AuthService, test_inactive_user: User):
        token = create_access_token(test_inactive_user.id, test_inactive_user.email, test_inactive_user.role)
        with pytest.raises(InactiveUserError):
            await auth_service.get_current_user(token)

    async def test_google_login_creates_verified_user(self, auth_service: AuthService):
        profile = GoogleProfile(email="g@example.com", name="Gina", picture="https://lh3.example.com/p.jpg")
        user, access_token, _ = await auth_service.login_with_google(profile)

        assert user.email == "g@example.com"
        assert user.has_password is False
        assert user.email_verified_at is not None
        assert user.image == "https://lh3.example.com/p.jpg"
        assert access_token

    async def test_google_login_links_existing_account(self, auth_service: AuthService, test_user: User):
        profile = GoogleProfile(email=test_user.email, name="Renamed", picture=None)
        user, _, _ = await auth_service.login_with_google(profile)

        assert user.id == test_user.id
        assert user.name == "Renamed"
        assert user.has_password  # credential login keeps working

    async def test_google_login_inactive_account(self, auth_service: AuthService, test_inactive_user: User):
        with pytest.raises(InactiveUserError):
            await auth_service.login_with_google(GoogleProfile(email=test_inactive_user.email, name=None, picture=None))

    async def test_password_reset_flow(self, db_session, test_user: User):
        service = AuthService(db_session, Settings(smtp_host="smtp.example.com"))

        with patch("rentals.services.auth.send_email") as mock_send:
            message = await service.request_password_reset(test_user.email)

        assert message == RESET_REQUESTED_MESSAGE
        mock_send.assert_called_once()
        reset = (await db_session.execute(select(PasswordReset))).scalars().one()
        assert reset.token in mock_send.call_args.args[3]

        await service.reset_password(reset.token, "a-new-password")
        assert (await service.authenticate_user(test_user.email, "a-new-password")).id == test_user.id

        # Tokens are single use
        with pytest.raises(ValidationError):
            await service.reset_password(reset.token, "another-password")

    async def test_password_reset_unknown_email(self, auth_service: AuthService, db_session):
        message = await auth_service.request_password_reset("nobody@example.com")
        assert message == RESET_REQUESTED_MESSAGE
        count = await db_session.execute(select(func.count(PasswordReset.id)))
        assert count.scalar() == 0

    async def test_reset_with_expired_token(self, auth_service: AuthService, db_session, test_user: User):
        db_session.add(PasswordReset(
            token="expired-token",
            user_id=test_user.id,
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
            used=False
        ))
        await db_session.commit()

        with pytest.raises(ValidationError, match="Invalid or expired"):
            await auth_service.reset_password("expired-token", "a-new-password")


class TestListingService:
    """Test ListingService functionality."""

    async def test_create_normalizes_images_and_encodes_lists(self, listing_service: ListingService, test_user: User):
        data = ListingCreate(**ListingFactory.create_request_data(
            images=["/foo.jpg", "https://res.cloudinary.com/x/b.jpg"],
            amenities="Gym, Pool"
        ))
        listing = await listing_service.create_listing(data, test_user)

        assert listing.image_list == [
            "https://squareonerentals.com/foo.jpg",
            "https://res.cloudinary.com/x/b.jpg"
        ]
        assert listing.amenity_list == ["Gym", "Pool"]
        assert listing.building_amenity_list == []
        assert listing.user_id == test_user.id
        assert listing.owner.id == test_user.id

    async def test_create_requires_user(self, listing_service: ListingService):
        with pytest.raises(AuthenticationError):
            await listing_service.create_listing(ListingCreate(**ListingFactory.create_request_data()), None)

    async def test_non_admin_cannot_create_featured(self, listing_service: ListingService, test_user: User):
        data = ListingCreate(**ListingFactory.create_request_data(featured=True))
        listing = await listing_service.create_listing(data, test_user)
        assert listing.featured is False

    async def test_admin_can_create_featured(self, listing_service: ListingService, test_admin: User):
        data = ListingCreate(**ListingFactory.create_request_data(featured=True))
        listing = await listing_service.create_listing(data, test_admin)
        assert listing.featured is True

    async def test_get_listing_not_found(self, listing_service: ListingService):
        with pytest.raises(NotFoundError):
            await listing_service.get_listing(uuid.uuid4())

    async def test_owner_updates_only_sent_fields(self, listing_service: ListingService, test_listing: Listing, test_user: User):
        updated = await listing_service.update_listing(
            test_listing.id, ListingUpdate(title="Renamed", price=Decimal("1750")), test_user
        )
        assert updated.title == "Renamed"
        assert updated.price == Decimal("1750")
        assert updated.location == "Toronto, ON"
        assert updated.amenity_list == ["Parking", "Gym"]

    async def test_update_invalid_list_value_becomes_empty(self, listing_service: ListingService, test_listing: Listing, test_user: User):
        updated = await listing_service.update_listing(
            test_listing.id, ListingUpdate(amenities={"not": "a list"}), test_user
        )
        assert updated.amenity_list == []

    async def test_non_owner_cannot_update(self, listing_service: ListingService, test_listing: Listing, other_user: User):
        with pytest.raises(AuthorizationError):
            await listing_service.update_listing(test_listing.id, ListingUpdate(title="Hijacked"), other_user)

        unchanged = await listing_service.get_listing(test_listing.id)
        assert unchanged.title == "Test Listing"

    async def test_owner_cannot_set_featured(self, listing_service: ListingService, test_listing: Listing, test_user: User):
        with pytest.raises(AuthorizationError):
            await listing_service.update_listing(test_listing.id, ListingUpdate(featured=True), test_user)

    async def test_admin_updates_any_listing(self, listing_service: ListingService, test_listing: Listing, test_admin: User):
        updated = await listing_service.update_listing(
            test_listing.id, ListingUpdate(featured=True, title="Promoted"), test_admin
        )
        assert updated.featured is True
        assert updated.title == "Promoted"

    async def test_update_missing_listing(self, listing_service: ListingService, test_user: User):
        with pytest.raises(NotFoundError):
            await listing_service.update_listing(uuid.uuid4(), ListingUpdate(title="x"), test_user)

    async def test_non_owner_cannot_delete(self, listing_service: ListingService, test_listing: Listing, other_user: User):
        with pytest.raises(AuthorizationError):
            await listing_service.delete_listing(test_listing.id, other_user)

    async def test_owner_deletes(self, listing_service: ListingService, test_listing: Listing, test_user: User):
        await listing_service.delete_listing(test_listing.id, test_user)
        with pytest.raises(NotFoundError):
            await listing_service.get_listing(test_listing.id)

    async def test_user_listings_visibility(self, listing_service: ListingService, test_listing: Listing,
                                           test_user: User, other_user: User, test_admin: User):
        assert len(await listing_service.get_user_listings(test_user.id, test_user)) == 1
        assert len(await listing_service.get_user_listings(test_user.id, test_admin)) == 1
        with pytest.raises(AuthorizationError):
            await listing_service.get_user_listings(test_user.id, other_user)


class TestFavoriteService:
    async def test_add_twice_keeps_one(self, db_session, test_listing: Listing, other_user: User):
        service = FavoriteService(db_session)
        assert await service.add_favorite(test_listing.id, other_user) is True
        assert await service.add_favorite(test_listing.id, other_user) is False
        assert [l.id for l in await service.list_favorites(other_user)] == [test_listing.id]

    async def test_add_missing_listing(self, db_session, other_user: User):
        with pytest.raises(NotFoundError):
            await FavoriteService(db_session).add_favorite(uuid.uuid4(), other_user)

    async def test_remove_absent_succeeds(self, db_session, test_listing: Listing, other_user: User):
        assert await FavoriteService(db_session).remove_favorite(test_listing.id, other_user) is False

    async def test_requires_user(self, db_session, test_listing: Listing):
        with pytest.raises(AuthenticationError):
            await FavoriteService(db_session).add_favorite(test_listing.id, None)


class TestReportService:
    async def count_reports(self, db_session) -> int:
        return (await db_session.execute(select(func.count(Report.id)))).scalar()

    async def test_listing_report_notifies_owner(self, db_session, test_listing: Listing, other_user: User, test_user: User):
        service = ReportService(db_session)
        report = await service.create_report(
            ReportCreate(type="listing", target_id=str(test_listing.id), reason="Scam"), other_user
        )

        assert report.status == ReportStatus.PENDING
        assert report.listing_id == test_listing.id
        assert report.reporter_id == other_user.id

        notes = (await db_session.execute(
            select(Notification).where(Notification.user_id == test_user.id)
        )).scalars().all()
        assert len(notes) == 1

    async def test_invalid_type_persists_nothing(self, db_session, test_listing: Listing, other_user: User):
        with pytest.raises(ValidationError):
            await ReportService(db_session).create_report(
                ReportCreate(type="SPAM", target_id=str(test_listing.id), reason="x"), other_user
            )
        assert await self.count_reports(db_session) == 0

    async def test_missing_fields(self, db_session, other_user: User):
        with pytest.raises(ValidationError, match="Missing required fields"):
            await ReportService(db_session).create_report(ReportCreate(type="LISTING"), other_user)

    async def test_missing_target(self, db_session, other_user: User):
        with pytest.raises(NotFoundError):
            await ReportService(db_session).create_report(
                ReportCreate(type="LISTING", target_id=str(uuid.uuid4()), reason="x"), other_user
            )
        with pytest.raises(NotFoundError):
            await ReportService(db_session).create_report(
                ReportCreate(type="USER", target_id="not-a-uuid", reason="x"), other_user
            )

    async def test_user_report(self, db_session, test_user: User, other_user: User):
        report = await ReportService(db_session).create_report(
            ReportCreate(type="USER", target_id=str(test_user.id), reason="Harassment"), other_user
        )
        assert report.listing_id is None
        assert report.target_id == str(test_user.id)

    async def test_status_lifecycle(self, db_session, test_listing: Listing, other_user: User, test_admin: User):
        service = ReportService(db_session)
        report = await service.create_report(
            ReportCreate(type="LISTING", target_id=str(test_listing.id), reason="Scam"), other_user
        )

        with pytest.raises(ValidationError):
            await service.update_status(report.id, "ARCHIVED", test_admin)

        resolved = await service.update_status(report.id, "resolved", test_admin)
        assert resolved.status == ReportStatus.RESOLVED

        # Setting the same value again succeeds
        assert (await service.update_status(report.id, "RESOLVED", test_admin)).status == ReportStatus.RESOLVED

        with pytest.raises(ValidationError):
            await service.update_status(report.id, "PENDING", test_admin)

        reporter_notes = (await db_session.execute(
            select(func.count(Notification.id)).where(Notification.user_id == other_user.id)
        )).scalar()
        assert reporter_notes == 1

    async def test_only_admins_moderate(self, db_session, test_listing: Listing, other_user: User):
        service = ReportService(db_session)
        report = await service.create_report(
            ReportCreate(type="LISTING", target_id=str(test_listing.id), reason="Scam"), other_user
        )
        with pytest.raises(AuthorizationError):
            await service.update_status(report.id, "RESOLVED", other_user)
        with pytest.raises(AuthorizationError):
            await service.list_reports(other_user)


class TestNotificationService:
    async def test_set_read_ownership(self, db_session, test_user: User, other_user: User):
        service = NotificationService(db_session)
        note = await service.notify(test_user.id, "Hello", "World")

        with pytest.raises(AuthorizationError):
            await service.set_read(note.id, other_user)

        updated = await service.set_read(note.id, test_user)
        assert updated.read is True

    async def test_set_read_missing(self, db_session, test_user: User):
        with pytest.raises(NotFoundError):
            await NotificationService(db_session).set_read(uuid.uuid4(), test_user)

    async def test_mark_all_read(self, db_session, test_user: User):
        service = NotificationService(db_session)
        await service.notify(test_user.id, "a", "a")
        await service.notify(test_user.id, "b", "b")
        assert await service.mark_all_read(test_user) == 2
        assert all(n.read for n in await service.list_notifications(test_user))


class TestAdminService:
    async def test_moderate_listing(self, db_session, test_listing: Listing, test_admin: User, test_user: User):
        service = AdminService(db_session)
        listing = await service.moderate_listing(
            test_listing.id, AdminListingUpdate(status="active", featured=True), test_admin
        )
        assert listing.status == ListingStatus.ACTIVE
        assert listing.featured is True

        notes = await NotificationService(db_session).list_notifications(test_user)
        assert len(notes) == 1

    @pytest.mark.parametrize("status", ["AVAILABLE", "DELETED", ""])
    async def test_moderate_rejects_other_statuses(self, db_session, test_listing: Listing, test_admin: User, status):
        with pytest.raises(ValidationError):
            await AdminService(db_session).moderate_listing(
                test_listing.id, AdminListingUpdate(status=status), test_admin
            )

    async def test_moderate_requires_a_change(self, db_session, test_listing: Listing, test_admin: User):
        with pytest.raises(ValidationError):
            await AdminService(db_session).moderate_listing(test_listing.id, AdminListingUpdate(), test_admin)

    async def test_non_admin_denied(self, db_session, test_listing: Listing, test_user: User):
        with pytest.raises(AuthorizationError):
            await AdminService(db_session).moderate_listing(
                test_listing.id, AdminListingUpdate(featured=True), test_user
            )

    async def test_update_role(self, db_session, test_user: User, test_admin: User):
        service = AdminService(db_session)
        user = await service.update_user_role(test_user.id, "admin", test_admin)
        assert user.role == UserRole.ADMIN

        with pytest.raises(ValidationError):
            await service.update_user_role(test_user.id, "SUPERUSER", test_admin)

    async def test_cannot_delete_self(self, db_session, test_admin: User):
        with pytest.raises(ValidationError):
            await AdminService(db_session).delete_user(test_admin.id, test_admin)

    async def test_delete_user(self, db_session, user_repository, test_user: User, test_admin: User):
        await AdminService(db_session).delete_user(test_user.id, test_admin)
        assert await user_repository.get_by_email(test_user.email) is None

    async def test_stats_and_activity(self, db_session, listing_repository, test_user: User, test_admin: User):
        await ListingFactory.create_listing(listing_repository, user_id=test_user.id, status=ListingStatus.ACTIVE)
        await ListingFactory.create_listing(listing_repository, user_id=test_user.id)
        service = AdminService(db_session)

        stats = await service.get_stats(test_admin)
        assert stats == {"total_users": 2, "total_listings": 2, "total_reports": 0, "active_listings": 1}

        await service.update_user_role(test_user.id, "ADMIN", test_admin)
        activity = await service.recent_activity(test_admin)
        assert activity[0].type == ActivityType.USER_UPDATED


class TestUserService:
    async def test_update_name_and_email(self, db_session, test_user: User):
        user = await UserService(db_session).update_profile(
            ProfileUpdate(name="Olive", email="olive@example.com"), test_user
        )
        assert user.name == "Olive"
        assert user.email == "olive@example.com"

    async def test_email_taken(self, db_session, test_user: User, other_user: User):
        with pytest.raises(ValidationError, match="already taken"):
            await UserService(db_session).update_profile(ProfileUpdate(email=other_user.email), test_user)

    async def test_change_password_requires_current(self, db_session, test_user: User):
        service = UserService(db_session)
        with pytest.raises(ValidationError):
            await service.update_profile(ProfileUpdate(new_password="new-password-1"), test_user)
        with pytest.raises(ValidationError):
            await service.update_profile(
                ProfileUpdate(current_password="wrong-password", new_password="new-password-1"), test_user
            )

        user = await service.update_profile(
            ProfileUpdate(current_password="testpassword123", new_password="new-password-1"), test_user
        )
        assert user.verify_password("new-password-1")

    async def test_oauth_account_cannot_change_password(self, db_session, user_repository):
        oauth_user = await UserFactory.create_user(user_repository, password=None)
        with pytest.raises(ValidationError):
            await UserService(db_session).update_profile(
                ProfileUpdate(current_password="whatever", new_password="new-password-1"), oauth_user
            )

    async def test_get_profile_missing(self, db_session, test_user: User):
        with pytest.raises(NotFoundError):
            await UserService(db_session).get_profile(uuid.uuid4(), test_user)
