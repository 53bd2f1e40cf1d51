"""Outbound account emails via the SendGrid REST API."""
import logging

import httpx

from taskapp.config import Settings

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to Task App"
GOODBYE_SUBJECT = "Goodbye from Task App"


class EmailService:
    """Sends account lifecycle emails.

    Delivery is best effort: failures are logged and never raised, because
    the account change that triggered the email has already been committed.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.transport = transport

    async def send_email(self, to_email: str, subject: str, text: str) -> bool:
        """
        Send a plain-text email.

        Args:
            to_email: Recipient address
            subject: Subject line
            text: Plain-text body

        Returns:
            True if the provider accepted the message, False otherwise
        """
        if not self.settings.email_api_key:
            logger.info(f"Email API key not configured, skipping '{subject}' to {to_email}")
            return False

        payload = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {"email": self.settings.email_from},
            "subject": subject,
            "content": [{"type": "text/plain", "value": text}],
        }
        headers = {
            "Authorization": f"Bearer {self.settings.email_api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.email_timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    self.settings.email_api_url, json=payload, headers=headers
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Email provider rejected '{subject}' to {to_email}: "
                f"{e.response.status_code} {e.response.text}"
            )
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Failed to send '{subject}' to {to_email}: {e}")
            return False

        logger.info(f"Sent '{subject}' to {to_email}")
        return True

    async def send_welcome_email(self, email: str, name: str) -> bool:
        """Greet a newly registered user."""
        text = (
            f"Dear {name},\n\nWe are so glad that you have joined us!"
            "\n\nRegards,\n\nTask App Team"
        )
        return await self.send_email(email, WELCOME_SUBJECT, text)

    async def send_goodbye_email(self, email: str, name: str) -> bool:
        """Say goodbye to a user whose account was deleted."""
        text = (
            f"Dear {name},\n\nWe are so sorry to see you go!"
            "\n\nRegards,\n\nTask App Team"
        )
        return await self.send_email(email, GOODBYE_SUBJECT, text)
