"""
Email Service using Resend
Booking emails are written as MJML templates and compiled to HTML before sending
"""

import asyncio
import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import ADMIN_NOTIFICATION_EMAIL, EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    admin_booking_notification_template,
    customer_booking_confirmation_template,
)

logger = logging.getLogger(__name__)


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict with 'html' and 'errors' keys
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


class EmailService:
    """
    Outbound email capability.

    send_email never raises: every outcome is reported as
    {"success": True, "messageId": ...} or {"success": False, "error": ...}
    so callers can record it in the notification log.
    """

    def __init__(
        self,
        api_key: Optional[str] = RESEND_API_KEY,
        from_address: str = EMAIL_FROM_ADDRESS,
        admin_email: Optional[str] = ADMIN_NOTIFICATION_EMAIL,
    ):
        self.api_key = api_key
        self.from_address = from_address
        self.admin_email = admin_email
        if api_key:
            resend.api_key = api_key

    async def send_email(self, to: Union[str, list[str]], subject: str, mjml_content: str) -> dict:
        recipients = [to] if isinstance(to, str) else to

        if not self.api_key:
            logger.error("❌ No email service configured - RESEND_API_KEY missing")
            return {"success": False, "error": "Email service not configured"}

        try:
            html_content = compile_mjml_to_html(mjml_content)
            logger.info(f"📧 Sending email via Resend to: {recipients}")
            email_data = {
                "from": self.from_address,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
            # The Resend SDK is synchronous; keep it off the event loop
            response = await asyncio.to_thread(resend.Emails.send, email_data)
            message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
            logger.info(f"✅ Email sent successfully via Resend: {message_id}")
            return {"success": True, "messageId": message_id}
        except Exception as e:
            logger.error(f"❌ Email send error to {recipients}: {e}")
            return {"success": False, "error": str(e)}

    async def send_admin_booking_notification(self, booking: dict) -> dict:
        """Notify the office inbox of a new booking"""
        if not self.admin_email:
            return {"success": False, "error": "ADMIN_NOTIFICATION_EMAIL not configured"}

        return await self.send_email(
            to=self.admin_email,
            subject=f"New Booking Created - {booking.get('bookingNumber')}",
            mjml_content=admin_booking_notification_template(booking),
        )

    async def send_booking_customer_confirmation(self, booking: dict) -> dict:
        """Confirm receipt of the booking to the customer"""
        customer = booking.get("customerDetails") or {}
        if not customer.get("email"):
            return {"success": False, "error": "Customer has no email address"}

        return await self.send_email(
            to=customer["email"],
            subject=f"Booking Received - {booking.get('bookingNumber')}",
            mjml_content=customer_booking_confirmation_template(booking),
        )
