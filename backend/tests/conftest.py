"""
SiteAdmin Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own temp data and upload directories, a Settings
       value pointing at them and a fresh app built by create_app(), so store
       locks and rate-limit counters never leak between tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── data_dir / upload_dir: Temporary directories
    ├── settings: Settings with mail configured and the temp dirs
    ├── app: create_app(settings)
    ├── test_client: HTTPX AsyncClient over ASGITransport
    ├── write_document: Helper that puts a JSON file into data_dir
    ├── mock_smtp: aiosmtplib.send replaced by an AsyncMock
    └── sample_image_bytes: Tiny JPEG for upload tests
"""

import json
import os
import tempfile
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any siteadmin import: siteadmin.main builds a module-level app
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="siteadmin_data_")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="siteadmin_uploads_")
os.environ["LOG_LEVEL"] = "WARNING"

from siteadmin.config import Settings  # noqa: E402
from siteadmin.main import create_app  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "public" / "uploads"


@pytest.fixture
def settings(data_dir, upload_dir):
    """
    Settings for one test.

    Mail is fully configured (the relay itself is mocked by mock_smtp) so
    only tests that want a broken configuration have to change it.
    """
    return Settings(
        data_dir=str(data_dir),
        upload_dir=str(upload_dir),
        mail_service="icloud",
        smtp_user="relay@example.se",
        smtp_pass="relay-secret",
        mail_from="relay@example.se",
        mail_to="info@example.se",
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_liveness(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def write_document(data_dir):
    """Write a JSON document straight to disk, bypassing the store."""

    def _write(filename, value):
        path = data_dir / filename
        path.write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_smtp():
    """aiosmtplib.send as seen by the mail service, replaced by an AsyncMock."""
    with patch("siteadmin.services.mail_service.aiosmtplib.send", new_callable=AsyncMock) as send:
        send.return_value = ({}, "OK")
        yield send


@pytest.fixture
def sample_image_bytes():
    """
    Provides minimal JPEG bytes for upload tests.

    Only the declared content type is checked, so SOI + JFIF header + EOI is
    enough.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
