"""
SiteAdmin Backend - Contact Route Tests
=======================================

What:  End-to-end tests for POST /api/send-email with the relay mocked.
"""

import aiosmtplib
import pytest

VALID_BODY = {
    "name": "Anna Berg",
    "email": "anna@example.se",
    "subject": "Offert",
    "message": "Hej, vi vill ha en offert på ett nytt kök.",
}


class TestSendEmail:
    """Tests for the happy path and validation."""

    @pytest.mark.asyncio
    async def test_valid_message_sent(self, test_client, mock_smtp):
        response = await test_client.post("/api/send-email", json=VALID_BODY)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "E-post skickat!"}
        mock_smtp.assert_awaited_once()
        message = mock_smtp.await_args.args[0]
        assert message["Subject"] == "Kontaktförfrågan: Offert"
        assert message["Reply-To"] == "anna@example.se"

    @pytest.mark.asyncio
    async def test_invalid_fields_listed(self, test_client, mock_smtp):
        """Every failing field is reported and nothing is sent."""
        body = {"name": "", "email": "inte-en-adress", "subject": "Hej", "message": "   "}
        response = await test_client.post("/api/send-email", json=body)

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert [e["path"] for e in errors] == ["name", "email", "message"]
        assert errors[1] == {
            "type": "field",
            "value": "inte-en-adress",
            "msg": "Invalid value",
            "path": "email",
            "location": "body",
        }
        mock_smtp.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_internationalized_domain_accepted(self, test_client, mock_smtp):
        body = dict(VALID_BODY, email="info@målare.se")
        response = await test_client.post("/api/send-email", json=body)

        assert response.status_code == 200
        mock_smtp.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_relay_failure_is_generic_500(self, test_client, mock_smtp):
        """Relay details stay in the log."""
        mock_smtp.side_effect = aiosmtplib.SMTPAuthenticationError(535, "5.7.8 bad credentials")

        response = await test_client.post("/api/send-email", json=VALID_BODY)

        assert response.status_code == 500
        assert response.json()["error"] == "Misslyckades att skicka e-post."
        assert "5.7.8" not in response.text


class TestSendEmailRateLimit:
    """Tests for the 3-per-minute limiter."""

    @pytest.mark.asyncio
    async def test_fourth_attempt_rejected(self, test_client, mock_smtp):
        """The fourth attempt within a minute is refused, valid or not."""
        for body in (VALID_BODY, {}, VALID_BODY):
            response = await test_client.post("/api/send-email", json=body)
            assert response.status_code != 429

        response = await test_client.post("/api/send-email", json=VALID_BODY)

        assert response.status_code == 429
        assert response.json()["error"] == "För många mailförsök, försök igen om en minut."
        assert 0 < int(response.headers["Retry-After"]) <= 60
        assert mock_smtp.await_count == 2

    @pytest.mark.asyncio
    async def test_origins_limited_separately(self, test_client, mock_smtp):
        for _ in range(3):
            await test_client.post(
                "/api/send-email", json=VALID_BODY, headers={"X-Forwarded-For": "198.51.100.1"}
            )

        response = await test_client.post(
            "/api/send-email", json=VALID_BODY, headers={"X-Forwarded-For": "198.51.100.2"}
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_malformed_json_counts_as_attempt(self, test_client, mock_smtp):
        """A body that fails to parse is refused by the limiter once the window is used up."""
        for _ in range(3):
            await test_client.post("/api/send-email", json=VALID_BODY)

        response = await test_client.post(
            "/api/send-email", content=b"{bad", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 429

    @pytest.mark.asyncio
    async def test_single_malformed_body_is_400(self, test_client, mock_smtp):
        response = await test_client.post(
            "/api/send-email", content=b"{bad", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Ogiltig JSON i förfrågan."
        mock_smtp.assert_not_awaited()
