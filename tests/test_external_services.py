"""
Tests for services that call external providers: Google token verification and Cloudinary uploads.
Network access is replaced with httpx.MockTransport and unittest.mock.
"""

import io
import pytest
import httpx
import cloudinary.exceptions
from unittest.mock import patch
from fastapi import UploadFile
from starlette.datastructures import Headers

from rentals.config import Settings
from rentals.services.oauth import GoogleOAuthService
from rentals.services.upload import UploadService
from rentals.utils.exceptions import (
    ExternalServiceError,
    InvalidTokenError,
    UploadError,
    ValidationError
)


CLIENT_ID = "client-123.apps.googleusercontent.com"


def google_service(handler) -> GoogleOAuthService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleOAuthService(Settings(google_client_id=CLIENT_ID), client=client)


def token_claims(**overrides) -> dict:
    claims = {
        "aud": CLIENT_ID,
        "email": "Gina@Example.com",
        "email_verified": "true",
        "name": "Gina",
        "picture": "https://lh3.example.com/p.jpg",
    }
    claims.update(overrides)
    return claims


class TestGoogleOAuthService:
    async def test_valid_token(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["id_token"] == "good-token"
            return httpx.Response(200, json=token_claims())

        profile = await google_service(handler).verify_id_token("good-token")
        assert profile.email == "gina@example.com"
        assert profile.name == "Gina"
        assert profile.picture == "https://lh3.example.com/p.jpg"

    async def test_rejected_token(self):
        service = google_service(lambda request: httpx.Response(400, json={"error": "invalid_token"}))
        with pytest.raises(InvalidTokenError):
            await service.verify_id_token("bad-token")

    async def test_wrong_audience(self):
        service = google_service(lambda request: httpx.Response(200, json=token_claims(aud="someone-else")))
        with pytest.raises(InvalidTokenError):
            await service.verify_id_token("token")

    async def test_unverified_email(self):
        service = google_service(lambda request: httpx.Response(200, json=token_claims(email_verified="false")))
        with pytest.raises(InvalidTokenError):
            await service.verify_id_token("token")

    async def test_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalServiceError) as exc_info:
            await google_service(handler).verify_id_token("token")
        assert exc_info.value.status_code == 502

    async def test_not_configured(self):
        service = GoogleOAuthService(Settings(google_client_id=None))
        with pytest.raises(ValidationError):
            await service.verify_id_token("token")


def make_upload(content: bytes = b"\x89PNG fake image", filename: str = "photo.png",
                content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


configured_settings = Settings(
    cloudinary_cloud_name="demo",
    cloudinary_api_key="key",
    cloudinary_api_secret="secret",
    max_file_size=1024
)


class TestUploadService:
    async def test_upload_returns_secure_url(self):
        service = UploadService(configured_settings)
        with patch("rentals.services.upload.cloudinary.uploader.upload") as mock_upload:
            mock_upload.return_value = {"secure_url": "https://res.cloudinary.com/demo/listings/photo.png"}
            url = await service.upload_image(make_upload())

        assert url == "https://res.cloudinary.com/demo/listings/photo.png"
        _, kwargs = mock_upload.call_args
        assert kwargs["folder"] == "listings"
        assert kwargs["cloud_name"] == "demo"

    async def test_not_configured(self):
        with pytest.raises(UploadError) as exc_info:
            await UploadService(Settings()).upload_image(make_upload())
        assert exc_info.value.status_code == 500

    async def test_missing_file(self):
        with pytest.raises(ValidationError):
            await UploadService(configured_settings).upload_image(None)

    async def test_rejects_non_image(self):
        with pytest.raises(ValidationError, match="Only images"):
            await UploadService(configured_settings).upload_image(
                make_upload(b"%PDF", filename="doc.pdf", content_type="application/pdf")
            )

    async def test_rejects_empty_and_oversized(self):
        service = UploadService(configured_settings)
        with pytest.raises(ValidationError, match="empty"):
            await service.upload_image(make_upload(b""))
        with pytest.raises(ValidationError, match="exceeds"):
            await service.upload_image(make_upload(b"x" * 2048))

    async def test_provider_error(self):
        service = UploadService(configured_settings)
        with patch("rentals.services.upload.cloudinary.uploader.upload",
                   side_effect=cloudinary.exceptions.Error("Invalid API key")):
            with pytest.raises(UploadError, match="Invalid API key"):
                await service.upload_image(make_upload())
