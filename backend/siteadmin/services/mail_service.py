"""
SiteAdmin Backend - Contact Mail Service
========================================

What:  Formats a contact-form submission and hands it to the mail relay.
How:   Builds a plain-text EmailMessage from a fixed template and sends it with
       aiosmtplib in a single attempt bounded by SMTP_TIMEOUT.
Who:   Called by POST /api/send-email after validation and rate limiting.

Relay resolution:
    MAIL_SERVICE names a well-known provider (default "icloud"); the table
    below gives its host, port and TLS mode. SMTP_HOST / SMTP_PORT override
    the table for any other relay.

    Port 465 → implicit TLS; other ports → STARTTLS when offered.

Failure policy:
    Every relay failure (unknown service, auth, network, timeout, rejected
    mailbox) is logged with its cause and raised as MailDeliveryError, whose
    message is generic. Nothing is retried.
"""

import logging
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Dict, List

import aiosmtplib

from siteadmin.config import Settings
from siteadmin.exceptions import MailDeliveryError
from siteadmin.schemas.requests import ContactMessage

logger = logging.getLogger(__name__)

SUBJECT_PREFIX = "Kontaktförfrågan: "


@dataclass(frozen=True)
class RelayEndpoint:
    host: str
    port: int

    @property
    def implicit_tls(self) -> bool:
        return self.port == 465


# ── Well-known relays ─────────────────────────────────────────────────────
WELL_KNOWN_SERVICES: Dict[str, RelayEndpoint] = {
    "icloud": RelayEndpoint("smtp.mail.me.com", 587),
    "me": RelayEndpoint("smtp.mail.me.com", 587),
    "gmail": RelayEndpoint("smtp.gmail.com", 465),
    "googlemail": RelayEndpoint("smtp.gmail.com", 465),
    "outlook": RelayEndpoint("smtp-mail.outlook.com", 587),
    "outlook365": RelayEndpoint("smtp.office365.com", 587),
    "office365": RelayEndpoint("smtp.office365.com", 587),
    "hotmail": RelayEndpoint("smtp-mail.outlook.com", 587),
    "yahoo": RelayEndpoint("smtp.mail.yahoo.com", 465),
    "zoho": RelayEndpoint("smtp.zoho.com", 465),
    "sendgrid": RelayEndpoint("smtp.sendgrid.net", 587),
    "mailgun": RelayEndpoint("smtp.mailgun.org", 465),
    "fastmail": RelayEndpoint("smtp.fastmail.com", 465),
    "gmx": RelayEndpoint("mail.gmx.com", 587),
}


def _single_line(value: str) -> str:
    return " ".join(value.split())


def format_body(contact: ContactMessage) -> str:
    return (
        f"Namn: {contact.name}\n"
        f"E-post: {contact.email}\n"
        f"\n"
        f"Meddelande:\n"
        f"{contact.message}"
    )


class MailService:
    """Sends contact messages through the relay described by Settings."""

    def __init__(self, settings: Settings):
        self.service = settings.mail_service.strip().lower()
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.username = settings.smtp_user
        self.password = settings.smtp_pass
        self.mail_from = settings.mail_from
        self.mail_to = settings.mail_to
        self.timeout = settings.smtp_timeout
        self._missing = settings.missing_mail_settings()

    def missing_settings(self) -> List[str]:
        return list(self._missing)

    def resolve_relay(self) -> RelayEndpoint:
        """
        Host/port of the relay to use.

        Raises:
            MailDeliveryError: MAIL_SERVICE is unknown and SMTP_HOST is unset
        """
        known = WELL_KNOWN_SERVICES.get(self.service)
        if self.smtp_host:
            port = self.smtp_port or (known.port if known else 587)
            return RelayEndpoint(self.smtp_host, port)
        if known is None:
            logger.error("Unknown MAIL_SERVICE '%s' and no SMTP_HOST configured", self.service)
            raise MailDeliveryError(context={"mail_service": self.service})
        if self.smtp_port:
            return RelayEndpoint(known.host, self.smtp_port)
        return known

    def build_message(self, contact: ContactMessage) -> EmailMessage:
        """Fixed template: subject prefix + plain-text body with all four fields."""
        msg = EmailMessage()
        msg["Subject"] = SUBJECT_PREFIX + _single_line(contact.subject)
        msg["From"] = self.mail_from
        msg["To"] = self.mail_to
        msg["Reply-To"] = contact.email
        msg.set_content(format_body(contact))
        return msg

    async def send_contact_message(self, contact: ContactMessage) -> None:
        """
        Deliver one contact message.

        Raises:
            MailDeliveryError: The relay did not accept the message
        """
        if not (self.mail_from and self.mail_to):
            logger.error("Mail delivery skipped: MAIL_FROM/MAIL_TO not configured")
            raise MailDeliveryError(context={"missing": self.missing_settings()})

        relay = self.resolve_relay()
        message = self.build_message(contact)
        try:
            await aiosmtplib.send(
                message,
                hostname=relay.host,
                port=relay.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=relay.implicit_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                "Mail delivery via %s:%d failed: %s: %s",
                relay.host,
                relay.port,
                type(e).__name__,
                str(e),
            )
            raise MailDeliveryError(
                context={"relay": relay.host, "error_type": type(e).__name__},
            )

        logger.info("Contact message from %s delivered via %s", contact.email, relay.host)
