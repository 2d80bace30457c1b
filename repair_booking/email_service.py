"""
Email notifications about bookings, sent through a transactional email API.

Everything here is best-effort: a missing configuration value turns sending
into a no-op and delivery failures are only logged.
"""
import logging
from pathlib import Path
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .config import Settings
from .schemas import BookingResponse

logger = logging.getLogger(__name__)

TEMPLATE_FOLDER = Path(__file__).parent / "templates"


class EmailNotifier:
    """Sends booking emails to the owner and to customers"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = settings.email_api_key
        self.sender = settings.email_from
        self.owner_email = settings.owner_email
        self.api_url = settings.email_api_url
        self.timeout = settings.email_timeout
        self.business_name = settings.business_name
        self.transport = transport

        self.templates = Environment(
            loader=FileSystemLoader(TEMPLATE_FOLDER),
            autoescape=select_autoescape(["html"]),
        )

        missing = [
            name for name, value in (
                ("RESEND_API_KEY", self.api_key),
                ("EMAIL_FROM", self.sender),
                ("OWNER_EMAIL", self.owner_email),
            )
            if not value
        ]
        if missing == ["OWNER_EMAIL"]:
            logger.warning("OWNER_EMAIL is not set, only customer emails will be sent")
        elif missing:
            logger.warning(f"{', '.join(missing)} not set, email notifications are disabled")

    def _can_send(self, recipient: Optional[str]) -> bool:
        return bool(self.api_key and self.sender and recipient)

    async def notify(self, recipient: Optional[str], subject: str, body: str) -> None:
        """Send one HTML email. Never raises."""
        if not self._can_send(recipient):
            logger.debug(f"Email skipped (not configured): {subject}")
            return

        payload = {
            "from": self.sender,
            "to": [recipient],
            "subject": subject,
            "html": body,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
            logger.info(f"Email sent to {recipient}: {subject}")
        except httpx.HTTPError as e:
            logger.error(f"Email to {recipient} failed: {e}")

    async def _send(self, recipient: Optional[str], subject: str, template: str, **context) -> None:
        if not self._can_send(recipient):
            return
        try:
            body = self.templates.get_template(template).render(
                business_name=self.business_name, **context
            )
            await self.notify(recipient, subject, body)
        except Exception:
            logger.exception(f"Could not send '{subject}' to {recipient}")

    async def booking_created(self, booking: BookingResponse) -> None:
        """Tell the owner about a new booking"""
        await self._send(
            self.owner_email,
            f"New booking: {booking.date}, {booking.label}",
            "new_booking.html",
            booking=booking,
        )

    async def booking_received(self, booking: BookingResponse) -> None:
        """Confirm a new booking to the customer"""
        await self._send(
            booking.email,
            f"Your booking with {self.business_name} on {booking.date}",
            "booking_received.html",
            booking=booking,
        )

    async def booking_status_changed(self, booking: BookingResponse) -> None:
        """Tell the owner and the customer that a booking was canceled or completed"""
        subject = f"Booking #{booking.id} {booking.status}: {booking.date}, {booking.label}"

        await self._send(
            self.owner_email, subject, "booking_status.html", booking=booking, for_owner=True
        )
        if booking.email:
            await self._send(
                booking.email, subject, "booking_status.html", booking=booking, for_owner=False
            )
