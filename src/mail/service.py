import logging
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from uuid import UUID

import aiosmtplib

from src.core.config import settings
from src.orders.status import OrderStatus

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    OrderStatus.PENDING: "Your order has been received and is pending confirmation.",
    OrderStatus.PROCESSING: "Your order is being processed.",
    OrderStatus.SHIPPED: "Your order has been shipped!",
    OrderStatus.DELIVERED: "Your order has been delivered!",
}

def render_status_update(order_id: UUID, status) -> tuple[str, str, str]:
    """Return (subject, text, html) for a status change email."""
    status = OrderStatus(status)
    message = STATUS_MESSAGES[status]
    subject = f"Order {order_id} - Status Update"
    text = (
        f"Your order {order_id} status has been updated to: {status.value}\n\n"
        f"{message}\n\n"
        "Thank you for your business!\n"
    )
    html = (
        "<h2>Order Status Update</h2>\n"
        f"<p>Your order <strong>{order_id}</strong> status has been updated to: "
        f"<strong>{status.value}</strong></p>\n"
        f"<p>{message}</p>\n"
        "<p>Thank you for your business!</p>\n"
    )
    return subject, text, html

class EmailService:
    def __init__(
        self,
        host: str = settings.MAIL_HOST,
        port: int = settings.MAIL_PORT,
        username: str | None = settings.MAIL_USER,
        password: str | None = settings.MAIL_PASSWORD,
        sender: str = settings.MAIL_FROM,
        start_tls: bool = settings.MAIL_START_TLS,
        timeout: float = settings.MAIL_TIMEOUT,
        enabled: bool = settings.MAIL_ENABLED,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.start_tls = start_tls
        self.timeout = timeout
        self.enabled = enabled

    def build_message(self, to: str, subject: str, text: str, html: str | None = None) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = make_msgid(domain=self.sender.rpartition("@")[2] or None)
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")
        return msg

    async def send_email(self, to: str, subject: str, text: str, html: str | None = None):
        if not self.enabled:
            logger.info(f"Mail disabled, not sending '{subject}' to {to}")
            return
        message = self.build_message(to, subject, text, html)
        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            start_tls=self.start_tls,
            timeout=self.timeout,
        )

    async def send_order_status_update(self, address: str, order_id: UUID, status):
        subject, text, html = render_status_update(order_id, status)
        await self.send_email(address, subject, text, html)
        logger.info(f"Order status email sent to {address} for order {order_id}")

email_service = EmailService()
