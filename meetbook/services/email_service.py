import boto3
from botocore.exceptions import BotoCoreError, ClientError
from datetime import date, datetime
from meetbook.core.config import settings
import html
import logging

logger = logging.getLogger(__name__)

_WEEKDAYS = ["måndag", "tisdag", "onsdag", "torsdag", "fredag", "lördag", "söndag"]
_MONTHS = [
    "januari", "februari", "mars", "april", "maj", "juni",
    "juli", "augusti", "september", "oktober", "november", "december",
]


def format_booking_date(day: date) -> str:
    """Long Swedish date, e.g. 'tisdag 16 december 2025'."""
    return f"{_WEEKDAYS[day.weekday()]} {day.day} {_MONTHS[day.month - 1]} {day.year}"


def customer_type_label(customer_type: str) -> str:
    return "Befintlig kund" if customer_type == "existing" else "Ny kund"


def _layout(inner: str) -> str:
    return f"""
    <html>
    <body style="margin: 0; padding: 0; background-color: #f5f5f5; font-family: Arial, Helvetica, sans-serif;">
      <table width="100%" cellpadding="0" cellspacing="0" style="padding: 40px 20px;">
        <tr><td align="center">
          <table width="600" cellpadding="0" cellspacing="0" style="background-color: #000000; border-radius: 12px; padding: 40px; color: #ffffff;">
            <tr><td>{inner}</td></tr>
            <tr><td style="padding-top: 20px; color: #444444; font-size: 12px; text-align: center;">&copy; {datetime.utcnow().year} {settings.BRAND_NAME}</td></tr>
          </table>
        </td></tr>
      </table>
    </body>
    </html>
    """


class EmailService:
    """AWS SES email service for verification codes and booking notices"""

    def __init__(self):
        client_kwargs = {
            "region_name": settings.AWS_SES_REGION,
        }
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            client_kwargs.update(
                {
                    "aws_access_key_id": settings.AWS_ACCESS_KEY_ID,
                    "aws_secret_access_key": settings.AWS_SECRET_ACCESS_KEY,
                }
            )

        self.ses_client = boto3.client("ses", **client_kwargs)

    def send_email(self, to_email: str, subject: str, body_html: str) -> bool:
        try:
            response = self.ses_client.send_email(
                Source=f"Bokning <{settings.BOOKING_FROM_EMAIL}>",
                ReplyToAddresses=[settings.BOOKING_FROM_EMAIL],
                Destination={"ToAddresses": [to_email]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Html": {"Data": body_html, "Charset": "UTF-8"}},
                },
            )
            logger.info(f"Email '{subject}' sent to {to_email}: {response['MessageId']}")
            return True

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Email sending failed: {e}")
            return False

    def send_verification_code(self, to_email: str, code: str) -> bool:
        body_html = _layout(
            f"""
            <h1 style="font-size: 24px;">Verifieringskod</h1>
            <p style="color: #888888;">Ange denna kod för att verifiera din e-post:</p>
            <p style="font-size: 36px; font-weight: bold; letter-spacing: 8px;">{code}</p>
            <p style="color: #666666; font-size: 14px;">Koden gäller i {settings.VERIFICATION_CODE_TTL_MINUTES} minuter.</p>
            """
        )
        return self.send_email(
            to_email, f"Din verifieringskod - {settings.BRAND_NAME}", body_html
        )

    def send_booking_confirmation(self, booking) -> bool:
        """Customer-facing confirmation with the meeting link."""
        body_html = _layout(
            f"""
            <h1 style="font-size: 28px;">Tack för din bokning!</h1>
            <p style="color: #888888;">Hej {html.escape(booking.name)}, din tid är bekräftad.</p>
            <p><strong>Datum:</strong> {format_booking_date(booking.booking_date)}</p>
            <p><strong>Tid:</strong> {booking.slot}</p>
            <p><strong>Längd:</strong> {settings.BOOKING_DURATION_MINUTES} minuter</p>
            <p><a href="{html.escape(booking.meeting_link)}" style="background-color: #ffffff; color: #000000; padding: 16px 40px; text-decoration: none; border-radius: 8px;">Anslut till mötet</a></p>
            <p style="color: #444444; font-size: 12px;">{html.escape(booking.meeting_link)}</p>
            """
        )
        return self.send_email(
            booking.email, f"Bokningsbekräftelse - {settings.BRAND_NAME}", body_html
        )

    def send_booking_notification(self, booking) -> bool:
        """Operator notice for a new booking."""
        type_label = customer_type_label(booking.customer_type)
        body_html = _layout(
            f"""
            <h1 style="font-size: 24px;">Ny Bokning Mottagen</h1>
            <p><strong>Kund:</strong> {html.escape(booking.name)} ({type_label})</p>
            <p><strong>E-post:</strong> <a href="mailto:{html.escape(booking.email)}">{html.escape(booking.email)}</a></p>
            <p><strong>Telefon:</strong> {html.escape(booking.phone)}</p>
            <p><strong>Datum:</strong> {format_booking_date(booking.booking_date)}</p>
            <p><strong>Tid:</strong> {booking.slot}</p>
            <p><strong>Beskrivning:</strong> {html.escape(booking.description or '-')}</p>
            <p><a href="{html.escape(booking.meeting_link)}">Öppna Zoom-möte</a></p>
            """
        )
        subject = (
            f"Ny Bokning: {booking.name} ({type_label}) - "
            f"{booking.booking_date.day} {_MONTHS[booking.booking_date.month - 1][:3]} kl {booking.slot}"
        )
        return self.send_email(settings.BOOKING_NOTIFY_EMAIL, subject, body_html)


def get_email_service() -> EmailService:
    return EmailService()
