# core/notifications.py
import requests
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional
from core.config import settings
from core.logging_config import logger

# -----------------------------------------------------
# 📨 Send webhook (Slack, Discord, Teams, etc.)
# -----------------------------------------------------
def send_webhook_message(message: str) -> bool:
    webhook_url = settings.NOTIFY_WEBHOOK_URL
    if not webhook_url:
        logger.debug("Webhook URL not configured, skipping.")
        return False

    try:
        response = requests.post(webhook_url, json={"content": message}, timeout=10)
        logger.info(f"Webhook sent (status {response.status_code})")
        return response.ok
    except requests.RequestException as e:
        logger.warning(f"Webhook failed: {e}")
        return False


# -----------------------------------------------------
# 📧 Send email (SMTP)
# -----------------------------------------------------
def send_email(
    subject: str,
    body: str,
    recipients: Optional[List[str]] = None,
    html_body: Optional[str] = None
) -> bool:
    """
    Send email via SMTP.

    Args:
        subject: Email subject
        body: Plain text email body
        recipients: List of recipient addresses (defaults to SMTP_TO)
        html_body: Optional HTML email body

    Returns:
        True when the message was handed to the SMTP server.
    """
    smtp_host = settings.SMTP_HOST
    smtp_port = settings.SMTP_PORT
    smtp_user = settings.SMTP_USER
    smtp_pass = settings.SMTP_PASS

    recipient_list = recipients or ([settings.SMTP_TO] if settings.SMTP_TO else [])

    if not recipient_list:
        logger.warning("No recipients specified, skipping email.")
        return False

    if not all([smtp_host, smtp_port, smtp_user, smtp_pass]):
        logger.warning("Email credentials missing, skipping email.")
        return False

    msg = MIMEMultipart("alternative")
    msg["From"] = smtp_user
    msg["To"] = ", ".join(recipient_list)
    msg["Subject"] = subject
    msg.attach(MIMEText(body, "plain"))
    if html_body:
        msg.attach(MIMEText(html_body, "html"))

    try:
        with smtplib.SMTP_SSL(smtp_host, smtp_port) as server:
            server.login(smtp_user, smtp_pass)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Email failed: {e}")
        return False

    logger.info(f"Email sent to {', '.join(recipient_list)}")
    return True


# -----------------------------------------------------
# 🔔 Fan-out helper used by scheduled jobs
# -----------------------------------------------------
def notify(subject: str, body: str):
    send_email(subject=subject, body=body)
    send_webhook_message(f"**{subject}**\n{body}")
