"""
Test configuration and fixtures for the rentals API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os

# Settings are read once at import time, so the environment is fixed first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-at-least-32-characters"
os.environ["SITE_ORIGIN"] = "https://squareonerentals.com"

import pytest
import uuid
from typing import AsyncGenerator, Dict, List, Optional
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from rentals.main import app
from rentals.database import Base, get_db
from rentals.models.listing import Listing, ListingStatus
from rentals.models.user import User, UserRole
from rentals.repositories.listing import ListingRepository
from rentals.repositories.user import UserRepository
from rentals.services.auth import AuthService
from rentals.services.listing import ListingService
from rentals.utils import list_codec
from rentals.utils.auth import create_access_token


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def test_engine():
    """In-memory database, created fresh for every test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def listing_repository(db_session: AsyncSession) -> ListingRepository:
    return ListingRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession) -> ListingService:
    return ListingService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: Optional[str] = "testpassword123",
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: str = None,
        password: Optional[str] = "testpassword123",
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> User:
        """Create a test user in the database."""
        user_data = UserFactory.create_user_data(
            email=email,
            password=password,
            name=name,
            role=role,
            is_active=is_active
        )
        return await user_repo.create_user(user_data)


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_listing_data(
        user_id: uuid.UUID = None,
        title: str = "Test Listing",
        description: str = "A bright test apartment",
        price: Decimal = Decimal("1500.00"),
        location: str = "Toronto, ON",
        bedrooms: int = 2,
        bathrooms: float = 1.0,
        size: int = 800,
        status: ListingStatus = ListingStatus.AVAILABLE,
        featured: bool = False,
        property_type: str = "APARTMENT",
        images: List[str] = None,
        amenities: List[str] = None,
        building_amenities: List[str] = None
    ) -> dict:
        """Create listing data dictionary with encoded list fields."""
        return {
            "user_id": user_id,
            "title": title,
            "description": description,
            "price": price,
            "location": location,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "size": size,
            "status": status,
            "featured": featured,
            "property_type": property_type,
            "images": list_codec.encode(images or []),
            "amenities": list_codec.encode(amenities or []),
            "building_amenities": list_codec.encode(building_amenities or []),
        }

    @staticmethod
    async def create_listing(listing_repo: ListingRepository, user_id: uuid.UUID, **overrides) -> Listing:
        """Create a test listing in the database."""
        listing_data = ListingFactory.create_listing_data(user_id=user_id, **overrides)
        return await listing_repo.create(listing_data)

    @staticmethod
    def create_request_data(**overrides) -> dict:
        """JSON body for POST /listings."""
        data = {
            "title": "Sunny 2BR near the park",
            "description": "Renovated unit with lots of light",
            "price": 2400,
            "location": "Toronto, ON",
            "bedrooms": 2,
            "bathrooms": 1.5,
            "size": 850,
            "property_type": "CONDO",
            "lease_type": "LONG_TERM",
        }
        data.update(overrides)
        return data


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="owner@example.com", name="Olivia Owner")


@pytest.fixture
async def other_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="other@example.com", name="Oscar Other")


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@example.com",
        name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@example.com",
        name="Inactive User",
        is_active=False
    )


@pytest.fixture
async def test_listing(listing_repository: ListingRepository, test_user: User) -> Listing:
    return await ListingFactory.create_listing(
        listing_repository,
        user_id=test_user.id,
        title="Test Listing",
        price=Decimal("1500.00"),
        bedrooms=2,
        amenities=["Parking", "Gym"]
    )


# Utility functions for tests
def auth_headers(user: User) -> Dict[str, str]:
    """Authorization header carrying a fresh access token for the user."""
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


def assert_error_response(response, status_code: int, code: str = None):
    """Assert the structured error body returned by the global handlers."""
    assert response.status_code == status_code
    body = response.json()
    assert "error" in body
    assert "timestamp" in body
    assert "request_id" in body
    if code is not None:
        assert body["code"] == code
    return body
