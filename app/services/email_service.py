"""
Email service for sending clearance notifications
"""

import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from flask import current_app
from app.templates.email_templates import get_clearance_update_email_template
from app.utils.exceptions import EmailError


class EmailService:
    """Email service class"""

    @staticmethod
    def send_clearance_update_email(to_email: str, full_name: str, title: str,
                                    description: str, status: str = 'info') -> bool:
        """
        Send a clearance status update

        Args:
            to_email: Recipient email
            full_name: Recipient full name
            title: Notification title, used as the subject
            description: Notification body
            status: success, warning, error or info

        Returns:
            True if sent successfully
        """
        html_content = get_clearance_update_email_template(full_name, title, description, status)
        return EmailService.send_notification_email(to_email, f"iClear: {title}", html_content)

    @staticmethod
    def send_notification_email(to_email: str, subject: str, message: str) -> bool:
        """
        Send notification email

        Args:
            to_email: Recipient email
            subject: Email subject
            message: Email message (HTML)

        Returns:
            True if sent successfully
        """
        try:
            return EmailService._send_email_html(to_email, subject, message)
        except EmailError:
            raise
        except Exception as e:
            raise EmailError(f"Failed to send notification email: {str(e)}")

    @staticmethod
    def _send_email_html(to_email: str, subject: str, html_content: str) -> bool:
        """Send HTML email"""
        mail_server = current_app.config.get('MAIL_SERVER', 'smtp.gmail.com')
        mail_port = current_app.config.get('MAIL_PORT', 587)
        mail_use_tls = current_app.config.get('MAIL_USE_TLS', True)
        mail_username = current_app.config.get('MAIL_USERNAME')
        mail_password = current_app.config.get('MAIL_PASSWORD')

        if not all([mail_username, mail_password]):
            raise EmailError("Email configuration not found")

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = formataddr(("iClear System", mail_username))
        msg['To'] = to_email
        msg.attach(MIMEText(html_content, 'html'))

        try:
            with smtplib.SMTP(mail_server, mail_port) as server:
                if mail_use_tls:
                    server.starttls(context=ssl.create_default_context())
                server.login(mail_username, mail_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailError(f"Failed to send email: {str(e)}")

        return True
