"""
Receipt notifications

The booking engine calls a notifier after commit; a failure here never
affects the booking.
"""
import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import format_datetime
from typing import List

from airbooking.core.config import Settings
from airbooking.schemas.booking import Receipt

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when a receipt could not be delivered"""
    pass


def _rfc1123(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value, usegmt=True)


def render_receipt(receipt: Receipt) -> tuple:
    """Subject and plain-text body of a receipt email"""
    names = ", ".join(receipt.passenger_names) or "(not provided)"
    subject = f"Your booking confirmation - {receipt.booking_reference}"
    body = (
        "Hello,\n\n"
        "Thank you for your booking. Here is your receipt:\n\n"
        f"Booking Reference: {receipt.booking_reference}\n"
        f"Flight: {receipt.flight_number}\n"
        f"Route: {receipt.departure_airport_code} -> {receipt.arrival_airport_code}\n"
        f"Departure: {_rfc1123(receipt.departure_time)}\n"
        f"Arrival: {_rfc1123(receipt.arrival_time)}\n"
        f"Cabin Class: {receipt.cabin_class.value.capitalize()}\n"
        f"Passengers: {receipt.passenger_count}\n"
        f"Passenger Names: {names}\n"
        f"Total Paid: ${receipt.total_amount:.2f}\n"
        f"Issued At: {_rfc1123(receipt.issued_at)}\n"
    )
    return subject, body


class ReceiptNotifier(ABC):
    """Interface for receipt delivery"""

    @abstractmethod
    async def send_receipt(self, to_email: str, receipt: Receipt) -> None:
        ...


class SmtpReceiptNotifier(ReceiptNotifier):
    """Sends plain-text receipts through an SMTP relay"""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _build_message(self, to_email: str, receipt: Receipt) -> EmailMessage:
        subject, body = render_receipt(receipt)
        message = EmailMessage()
        message["From"] = self.settings.FROM_EMAIL
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        settings = self.settings
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SECONDS) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(message)

    async def send_receipt(self, to_email: str, receipt: Receipt) -> None:
        if not self.settings.smtp_configured:
            raise NotificationError("mail config missing")

        message = self._build_message(to_email, receipt)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP delivery failed: {e}") from e

        logger.info(
            "Receipt email sent",
            extra={'booking_reference': receipt.booking_reference}
        )


class ConsoleReceiptNotifier(ReceiptNotifier):
    """Logs receipts instead of sending them; keeps them for inspection"""

    def __init__(self):
        self.sent: List[dict] = []

    async def send_receipt(self, to_email: str, receipt: Receipt) -> None:
        subject, body = render_receipt(receipt)
        self.sent.append({
            'to': to_email,
            'subject': subject,
            'body': body,
            'receipt': receipt,
        })
        logger.info(
            f"Receipt email to {to_email}: {subject}\n{body}",
            extra={'booking_reference': receipt.booking_reference}
        )


def build_notifier(settings: Settings) -> ReceiptNotifier:
    backend = settings.NOTIFIER_BACKEND.strip().lower()
    if backend == "console":
        return ConsoleReceiptNotifier()
    if backend == "smtp":
        return SmtpReceiptNotifier(settings)
    raise ValueError(f"Unknown NOTIFIER_BACKEND: {settings.NOTIFIER_BACKEND}")
