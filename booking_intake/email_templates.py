"""
MJML Email Templates
Booking notification emails, compiled to HTML by email_service
"""

from html import escape
from typing import Optional

from .config import COMPANY_NAME, FRONTEND_URL

# Brand colors - Teal/Slate color scheme
THEME = {
    "primary": "#14b8a6",
    "primary_dark": "#0d9488",
    "primary_light": "#ccfbf1",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 40px 0 40px">
          <mj-column>
            <mj-text font-size="20px" font-weight="700" color="{THEME['primary_dark']}" padding="0 0 24px 0">
              {escape(COMPANY_NAME)}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 32px 0" />
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © {escape(COMPANY_NAME)}. All rights reserved.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_rows(rows: list[tuple[str, object]]) -> str:
    """Label/value lines for the booking summary box"""
    lines = []
    for label, value in rows:
        display = escape(str(value)) if value not in (None, "") else "Not provided"
        lines.append(
            f"""
            <mj-text color="{THEME['text_muted']}" font-size="14px" padding="0 0 6px 0">
              <strong style="color: {THEME['text_primary']};">{label}:</strong> {display}
            </mj-text>
            """
        )
    return "".join(lines)


def admin_booking_notification_template(booking: dict) -> str:
    """New booking alert for the office inbox"""
    customer = booking.get("customerDetails") or {}
    pricing = booking.get("pricing") or {}
    customer_name = escape(f"{customer.get('firstName', '')} {customer.get('lastName', '')}".strip())
    booking_number = escape(booking.get("bookingNumber", ""))
    service = escape(booking.get("selectedService", ""))

    summary = _detail_rows(
        [
            ("Booking number", booking.get("bookingNumber")),
            ("Service", booking.get("selectedService")),
            ("Customer", f"{customer.get('firstName', '')} {customer.get('lastName', '')}".strip()),
            ("Email", customer.get("email")),
            ("Phone", customer.get("phone")),
            ("Address", customer.get("address")),
            ("Suburb", customer.get("suburb")),
            ("Postcode", customer.get("postcode")),
            ("Scheduled date", customer.get("scheduleDate")),
            ("Total price", pricing.get("totalPrice")),
            ("Notes", customer.get("notes")),
        ]
    )

    content = f"""
    <mj-text>
      A new {service} booking has been created for {customer_name}.
    </mj-text>

    <mj-text font-size="16px" font-weight="600" color="{THEME['text_primary']}" padding="16px 0 12px 0">
      📋 Booking Summary
    </mj-text>
    {summary}
    """

    return get_base_template(
        title=f"New Booking Created - {booking_number}",
        preview_text=f"New {service} booking {booking_number} from {customer_name}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/admin/bookings/{booking_number}",
        cta_label="View Booking",
    )


def customer_booking_confirmation_template(booking: dict) -> str:
    """Confirmation sent to the customer once the booking is stored"""
    customer = booking.get("customerDetails") or {}
    pricing = booking.get("pricing") or {}
    first_name = escape(customer.get("firstName", ""))
    booking_number = escape(booking.get("bookingNumber", ""))

    summary = _detail_rows(
        [
            ("Booking number", booking.get("bookingNumber")),
            ("Service", booking.get("selectedService")),
            ("Address", customer.get("address")),
            ("Scheduled date", customer.get("scheduleDate")),
            ("Total price", pricing.get("totalPrice")),
        ]
    )

    content = f"""
    <mj-text>
      Hi {first_name},
    </mj-text>

    <mj-text>
      Thanks for booking with {escape(COMPANY_NAME)}! We've received your request and our team
      will confirm your appointment shortly.
    </mj-text>

    <mj-text font-size="16px" font-weight="600" color="{THEME['text_primary']}" padding="16px 0 12px 0">
      Your Booking
    </mj-text>
    {summary}

    <mj-text padding="20px 0 0 0">
      Please quote your booking number <strong>{booking_number}</strong> if you contact us.
    </mj-text>
    """

    return get_base_template(
        title="Booking Received",
        preview_text=f"Your booking {booking_number} has been received",
        content_sections=content,
    )
