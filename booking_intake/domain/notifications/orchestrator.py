"""
Post-booking notification fan-out.

Runs after the booking response has been sent. Every side effect is an
independent task: one failing never stops, delays or retries another, and
nothing is raised back to the caller.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from sqlalchemy.orm import Session

from ...email_service import EmailService
from ...services.workforce_webhook import WorkforceWebhook
from .exceptions import NotificationDeliveryError
from .repository import NotificationLog
from .schemas import NotificationStatus, NotificationType

logger = logging.getLogger(__name__)


def _customer_name(booking: dict) -> str:
    customer = booking.get("customerDetails") or {}
    return f"{customer.get('firstName', '')} {customer.get('lastName', '')}".strip()


def booking_audit_metadata(booking: dict) -> dict:
    """Snapshot of the booking's key fields at the time it was logged"""
    customer = booking.get("customerDetails") or {}
    pricing = booking.get("pricing") or {}
    return {
        "customerName": _customer_name(booking),
        "bookingNumber": booking.get("bookingNumber"),
        "serviceType": booking.get("selectedService"),
        "scheduledDate": customer.get("scheduleDate"),
        "customerEmail": customer.get("email"),
        "customerPhone": customer.get("phone"),
        "totalPrice": pricing.get("totalPrice"),
        "address": customer.get("address"),
        "suburb": customer.get("suburb"),
        "postcode": customer.get("postcode"),
    }


class NotificationOrchestrator:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        email_service: EmailService,
        webhook: WorkforceWebhook,
    ):
        self.session_factory = session_factory
        self.email_service = email_service
        self.webhook = webhook

    async def notify(self, booking: dict) -> dict[str, bool]:
        """
        Run every post-booking task concurrently and wait for all of them to settle.

        Returns {task_name: succeeded} for logging; never raises.
        """
        booking_number = booking.get("bookingNumber")
        tasks = {
            "admin_email": self._send_admin_email,
            "customer_email": self._send_customer_email,
            "audit_log": self._write_audit_log,
            "workforce_webhook": self._trigger_workforce_webhook,
        }

        results = await asyncio.gather(
            *(self._supervise(name, task, booking) for name, task in tasks.items()),
            return_exceptions=True,
        )
        outcome = {name: result is True for name, result in zip(tasks, results)}

        failed = [name for name, ok in outcome.items() if not ok]
        if failed:
            logger.warning(f"⚠️ Notifications for {booking_number} finished with failures: {failed}")
        else:
            logger.info(f"✅ All notifications for {booking_number} completed")
        return outcome

    async def _supervise(
        self, name: str, task: Callable[[dict], Awaitable[bool]], booking: dict
    ) -> bool:
        """
        A task returning False has already recorded its own failure (a failed
        delivery row). Only a raised exception gets an admin_alert row.
        """
        try:
            return await task(booking)
        except Exception as e:
            error = NotificationDeliveryError(name, str(e))
            logger.error(f"❌ {booking.get('bookingNumber')} {error}")
            self._record_task_failure(booking, error)
            return False

    def _record_task_failure(self, booking: dict, error: NotificationDeliveryError) -> None:
        """Best-effort internal alert row so staff can see which side effect failed"""
        try:
            with self.session_factory() as db:
                NotificationLog.log_delivery(
                    db,
                    booking_id=booking.get("id"),
                    booking_number=booking.get("bookingNumber") or "unknown",
                    notification_type=NotificationType.ADMIN_ALERT.value,
                    title="Booking Notification Error",
                    message=f"Post-booking task {error.task} failed: {error.message}",
                    delivery_method="internal",
                    status=NotificationStatus.FAILED,
                    error_message=error.message,
                )
        except Exception as log_error:
            logger.error(f"❌ Could not record notification failure for {error.task}: {log_error}")

    async def _deliver_email(
        self,
        task_name: str,
        booking: dict,
        notification_type: NotificationType,
        recipient: str,
        title: str,
        message: str,
        send: Callable[[dict], Awaitable[dict]],
    ) -> bool:
        """pending row -> send -> sent | failed"""
        with self.session_factory() as db:
            entry = NotificationLog.log_delivery(
                db,
                booking_id=booking.get("id"),
                booking_number=booking.get("bookingNumber"),
                notification_type=notification_type.value,
                title=title,
                message=message,
                delivery_method="email",
                recipient_email=recipient,
            )

            result = await send(booking)

            if result.get("success"):
                NotificationLog.mark_sent(
                    db,
                    entry,
                    external_id=result.get("messageId"),
                    external_status="Email sent successfully",
                )
                logger.info(f"📧 {task_name} sent for {booking.get('bookingNumber')}")
                return True

            error_message = result.get("error") or "Unknown email error"
            NotificationLog.mark_failed(db, entry, error_message)

        logger.error(f"❌ {booking.get('bookingNumber')} {task_name}: {error_message}")
        return False

    async def _send_admin_email(self, booking: dict) -> bool:
        booking_number = booking.get("bookingNumber")
        return await self._deliver_email(
            "admin_email",
            booking,
            NotificationType.BOOKING_CREATED,
            recipient=self.email_service.admin_email,
            title=f"New Booking Created - {booking_number}",
            message=(
                f"A new {booking.get('selectedService')} booking has been created for "
                f"{_customer_name(booking)}"
            ),
            send=self.email_service.send_admin_booking_notification,
        )

    async def _send_customer_email(self, booking: dict) -> bool:
        booking_number = booking.get("bookingNumber")
        customer = booking.get("customerDetails") or {}
        return await self._deliver_email(
            "customer_email",
            booking,
            NotificationType.BOOKING_CONFIRMATION,
            recipient=customer.get("email"),
            title=f"Booking Confirmation - {booking_number}",
            message=f"Booking confirmation for {_customer_name(booking)}",
            send=self.email_service.send_booking_customer_confirmation,
        )

    async def _write_audit_log(self, booking: dict) -> bool:
        booking_number = booking.get("bookingNumber")
        with self.session_factory() as db:
            NotificationLog.log_audit(
                db,
                booking_id=booking.get("id"),
                booking_number=booking_number,
                notification_type=NotificationType.NEW_MAIN_BOOKING.value,
                title="New Booking Received",
                message=f"New booking #{booking_number} from {_customer_name(booking)}",
                metadata=booking_audit_metadata(booking),
            )
        return True

    async def _trigger_workforce_webhook(self, booking: dict) -> bool:
        await self.webhook.trigger(booking.get("bookingNumber"))
        return True
