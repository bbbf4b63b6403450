"""
Notifications Module - Email and Telegram notifications to the site owner
"""

import html
import smtplib
import threading
import requests
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app


def get_owner_notifications_config():
    """Load owner notification settings from app config"""
    return {
        'telegram': {
            'bot_token': current_app.config.get('ADMIN_TELEGRAM_BOT_TOKEN') or '',
            'chat_id': current_app.config.get('ADMIN_TELEGRAM_CHAT_ID') or ''
        },
        'smtp': {
            'host': current_app.config.get('ADMIN_SMTP_HOST') or '',
            'port': current_app.config.get('ADMIN_SMTP_PORT') or '587',
            'email': current_app.config.get('ADMIN_SMTP_EMAIL') or '',
            'password': current_app.config.get('ADMIN_SMTP_PASSWORD') or ''
        }
    }


def send_email(recipient, subject, body, html=False):
    """
    Send email using the configured SMTP account

    Args:
        recipient (str): Email recipient
        subject (str): Email subject
        body (str): Email body
        html (bool): Whether body is HTML

    Returns:
        bool: Success status
    """
    smtp_config = get_owner_notifications_config()['smtp']
    if not all([
        smtp_config.get('host'),
        smtp_config.get('port'),
        smtp_config.get('email'),
        smtp_config.get('password')
    ]):
        current_app.logger.debug("SMTP config incomplete, email not sent")
        return False

    try:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = smtp_config.get('email')
        msg['To'] = recipient
        msg.attach(MIMEText(body, 'html' if html else 'plain'))

        with smtplib.SMTP(smtp_config.get('host'),
                          int(smtp_config.get('port'))) as server:
            server.starttls()
            server.login(smtp_config.get('email'), smtp_config.get('password'))
            server.send_message(msg)

        current_app.logger.info(f"Email sent to {recipient}")
        return True
    except (smtplib.SMTPException, OSError, ValueError) as e:
        current_app.logger.error(f"Error sending email to {recipient}: {str(e)}")
        return False


def send_telegram_notification(message_text):
    """
    Send a Telegram message to the owner's chat

    Returns:
        bool: True if sent successfully, False otherwise
    """
    telegram = get_owner_notifications_config()['telegram']
    if not (telegram['bot_token'] and telegram['chat_id']):
        current_app.logger.debug("Owner Telegram credentials not configured")
        return False

    try:
        url = f"https://api.telegram.org/bot{telegram['bot_token']}/sendMessage"
        payload = {
            'chat_id': telegram['chat_id'],
            'text': message_text,
            'parse_mode': 'HTML'
        }
        response = requests.post(url, json=payload, timeout=10)
        if response.status_code == 200:
            current_app.logger.info("Telegram notification sent")
            return True
        current_app.logger.error(f"Telegram API error: {response.status_code}")
        return False
    except requests.RequestException as e:
        current_app.logger.error(f"Telegram notification error: {str(e)}")
        return False


def _in_background(func, *args):
    app = current_app._get_current_object()

    def _run():
        with app.app_context():
            func(*args)

    thread = threading.Thread(target=_run)
    thread.daemon = True
    thread.start()
    return thread


def notify_new_submission(submission):
    """Tell the owner about a new contact submission (fire and forget)"""
    preview = submission.message[:200] + ('...' if len(submission.message) > 200 else '')
    # Telegram parses the text as HTML
    text = (
        f"📧 <b>New {html.escape(submission.submission_type.title())} Submission</b>\n\n"
        f"👤 <b>From:</b> {html.escape(submission.name)}\n"
        f"📧 <b>Email:</b> {html.escape(submission.email)}\n"
        f"💬 <b>Message:</b>\n{html.escape(preview)}"
    )
    _in_background(send_telegram_notification, text)
    return True


def send_password_reset_email(email, reset_url):
    site_name = current_app.config.get('SITE_NAME', 'Portfolio')
    body = (
        f"<h3>{site_name} password reset</h3>"
        f"<p>Follow this link to choose a new password. It expires in one hour.</p>"
        f"<p><a href=\"{reset_url}\">{reset_url}</a></p>"
        f"<p>If you did not ask for this, ignore this email.</p>"
    )
    return send_email(email, f"[{site_name}] Reset your password", body, html=True)


__all__ = [
    'get_owner_notifications_config',
    'send_email',
    'send_telegram_notification',
    'notify_new_submission',
    'send_password_reset_email'
]
