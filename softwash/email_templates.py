"""
MJML Email Templates
All customer and owner emails, compiled to HTML by email_service
"""

from html import escape
from typing import Optional

from .config import BUSINESS_NAME, BUSINESS_PHONE

THEME = {
    "primary": "#1d4ed8",
    "primary_dark": "#1e3a8a",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
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
              href="{escape(cta_url)}"
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

    phone_line = f" • {escape(BUSINESS_PHONE)}" if BUSINESS_PHONE else ""

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
            <mj-text font-size="20px" font-weight="700" color="{THEME['primary_dark']}" padding="0">
              {escape(BUSINESS_NAME)}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="24px 0 32px 0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {escape(BUSINESS_NAME)}{phone_line}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def booking_confirmation_template(
    customer_name: str,
    service: str,
    appointments: list[dict],
    price: Optional[str] = None,
    day2_notice: Optional[str] = None,
) -> str:
    """Sent to the customer after a successful online booking"""
    rows = "<br/>".join(
        f"{escape(a['date'])} at {escape(a['time'])} ({a['duration']} hr)" for a in appointments
    )
    price_line = f"<br/>Estimated price: {escape(price)}" if price else ""
    notice = ""
    if day2_notice:
        notice = f"""
    <mj-text font-size="14px" color="{THEME['text_muted']}">
      {escape(day2_notice)}
    </mj-text>
        """

    content = f"""
    <mj-text>
      Hi {escape(customer_name or 'there')},
    </mj-text>

    <mj-text>
      Thanks for booking <strong>{escape(service or 'your service')}</strong>. Your appointment is on the calendar.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="10px 0">
      {rows}{price_line}
    </mj-text>
    {notice}
    <mj-text>
      We'll reach out before your visit. Reply to this email or call us if anything changes.
    </mj-text>
    """

    return get_base_template(
        title="Appointment Confirmed",
        preview_text=f"Your {service or 'service'} appointment is booked",
        content_sections=content,
    )


def new_booking_notification_template(
    customer_name: str,
    email: str,
    phone: str,
    address: str,
    service: str,
    appointments: list[dict],
    price: Optional[str] = None,
    notes: Optional[str] = None,
) -> str:
    """Sent to the business owner when a customer books online"""
    rows = "<br/>".join(
        f"{escape(a['date'])} at {escape(a['time'])} ({a['duration']} slot(s))" for a in appointments
    )
    content = f"""
    <mj-text>
      <strong>{escape(customer_name or 'A customer')}</strong> booked <strong>{escape(service or 'a service')}</strong>.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="10px 0">
      {rows}<br/>
      Price: {escape(price or 'n/a')}<br/>
      Email: {escape(email or 'n/a')}<br/>
      Phone: {escape(phone or 'n/a')}<br/>
      Address: {escape(address or 'n/a')}
    </mj-text>

    <mj-text font-size="14px">
      {escape(notes or '')}
    </mj-text>
    """

    return get_base_template(
        title="New Booking",
        preview_text=f"New booking from {customer_name}",
        content_sections=content,
    )


def contact_message_template(
    name: str, email: str, phone: str, service: str, message: str
) -> str:
    """Plain contact form submission, sent to the business owner"""
    content = f"""
    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="10px 0">
      Name: {escape(name or 'n/a')}<br/>
      Email: {escape(email or 'n/a')}<br/>
      Phone: {escape(phone or 'n/a')}<br/>
      Service: {escape(service or 'n/a')}
    </mj-text>

    <mj-text>
      {escape(message or '')}
    </mj-text>
    """

    return get_base_template(
        title=f"New Contact from {escape(name or 'website visitor')}",
        preview_text="New contact form message",
        content_sections=content,
    )


def invoice_template(
    customer_name: str,
    invoice_number: str,
    service: str,
    amount: float,
    due_date: str,
) -> str:
    """Invoice notification for the customer"""
    content = f"""
    <mj-text>
      Hi {escape(customer_name or 'there')},
    </mj-text>

    <mj-text>
      Thank you for choosing <strong>{escape(BUSINESS_NAME)}</strong>. Your invoice for
      <strong>{escape(service or 'service')}</strong> is below.
    </mj-text>

    <mj-text align="center" font-size="32px" font-weight="700" color="{THEME['text_primary']}" padding="20px 0">
      ${amount:,.2f}
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      Invoice: {escape(invoice_number)}<br/>
      Due Date: {escape(due_date)}
    </mj-text>

    <mj-text font-size="14px">
      We accept cash, check, card, Venmo and Zelle.
    </mj-text>
    """

    return get_base_template(
        title="Your Invoice",
        preview_text=f"Invoice {invoice_number} - due {due_date}",
        content_sections=content,
    )


def payment_receipt_template(
    customer_name: str,
    invoice_number: str,
    service: str,
    amount: float,
    payment_date: str,
    payment_method: Optional[str] = None,
) -> str:
    """Payment confirmation for the customer"""
    method_line = f"<br/>Method: {escape(payment_method)}" if payment_method else ""
    content = f"""
    <mj-text>
      Hi {escape(customer_name or 'there')},
    </mj-text>

    <mj-text>
      Thank you! Your payment for <strong>{escape(service or 'service')}</strong> has been received.
    </mj-text>

    <mj-text align="center" font-size="36px" font-weight="700" color="{THEME['success']}" padding="20px 0">
      ${amount:,.2f}
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="20px 0">
      Invoice: {escape(invoice_number)}<br/>
      Payment Date: {escape(payment_date)}{method_line}
    </mj-text>
    """

    return get_base_template(
        title="Payment Received",
        preview_text=f"Payment received - {invoice_number}",
        content_sections=content,
    )


def review_request_template(customer_name: str, service: str, review_url: str) -> str:
    content = f"""
    <mj-text>
      Hi {escape(customer_name or 'there')},
    </mj-text>

    <mj-text>
      Thanks again for trusting us with your {escape(service or 'service')}. If you were happy
      with the results, a quick review helps our small business more than you know.
    </mj-text>
    """

    return get_base_template(
        title="How did we do?",
        preview_text="We'd love your feedback",
        content_sections=content,
        cta_url=review_url,
        cta_label="Leave a Review",
    )
