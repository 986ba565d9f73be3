"""Approval email sender (SMTP with STARTTLS). Independent of the validation pipeline."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from html import escape

from resume_validation.core.config import Settings

logger = logging.getLogger("notifications.email")

APPROVAL_SUBJECT = "Registration Approved - Login Credentials"

APPROVAL_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 10px;">
    <h2 style="color: #1e3a8a; text-align: center;">Registration Approved! 🎉</h2>
    <p>Dear <strong>{name}</strong>,</p>
    <p>Congratulations! Your registration for the <strong>Code &amp; Quest Feria 2025</strong> has been verified and approved.</p>
    <p>You can now log in to the candidate portal using the credentials below:</p>

    <div style="background-color: #f3f4f6; padding: 15px; border-radius: 8px; margin: 20px 0;">
        <p style="margin: 5px 0;"><strong>User Name (Roll No):</strong> <span style="font-family: monospace; font-size: 16px;">{roll_number}</span></p>
        <p style="margin: 5px 0;"><strong>Password:</strong> <span style="font-family: monospace; font-size: 16px; color: #d97706;">{password}</span></p>
    </div>

    <div style="text-align: center; margin-top: 30px;">
        <a href="{login_url}" style="background-color: #2563eb; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold;">Login Now</a>
    </div>

    <p style="margin-top: 30px; font-size: 12px; color: #6b7280; text-align: center;">
        If you did not register for this event, please ignore this email.
    </p>
</div>
"""


class EmailNotifier:
    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.EMAIL_USER
        self.password = settings.EMAIL_PASS
        self.from_name = settings.EMAIL_FROM_NAME

    def build_approval_message(
        self, *, email: str, name: str, roll_number: str, password: str, login_url: str
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = APPROVAL_SUBJECT
        msg["From"] = f'"{self.from_name}" <{self.user or ""}>'
        msg["To"] = email
        msg.set_content(
            f"Dear {name},\n\nYour registration has been approved.\n"
            f"User Name (Roll No): {roll_number}\nPassword: {password}\nLogin: {login_url}\n"
        )
        msg.add_alternative(
            APPROVAL_TEMPLATE.format(
                name=escape(name or ""),
                roll_number=escape(roll_number or ""),
                password=escape(password or ""),
                login_url=escape(login_url or "", quote=True),
            ),
            subtype="html",
        )
        return msg

    def send_approval_email(
        self, *, email: str, name: str, roll_number: str, password: str, login_url: str
    ) -> None:
        if not self.user or not self.password:
            raise ValueError("EMAIL_USER / EMAIL_PASS are not set. Please add them to your environment or .env file.")
        msg = self.build_approval_message(
            email=email, name=name, roll_number=roll_number, password=password, login_url=login_url
        )
        with smtplib.SMTP(self.host, self.port) as smtp:
            smtp.starttls()
            smtp.login(self.user, self.password)
            smtp.send_message(msg)
        logger.info("Email sent to %s", email)
