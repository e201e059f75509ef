"""
Outgoing email.

Only the console transport exists: messages are written to the log. Any
other EMAIL_SERVICE value raises EmailNotConfigured.
"""
import logging

import config

logger = logging.getLogger(__name__)


class EmailNotConfigured(Exception):
    pass


def send_email(to: str, subject: str, text: str, html: str = "") -> dict:
    if config.EMAIL_SERVICE == "console":
        logger.info("Email would be sent:\nTo: %s\nSubject: %s\n%s", to, subject, text)
        return {"success": True, "message_id": "console-stub"}

    raise EmailNotConfigured(f"Email service '{config.EMAIL_SERVICE}' is not configured")


def send_verification_email(user: dict, token: str) -> dict:
    url = f"{config.CLIENT_URL}/verify-email?token={token}"
    name = user.get("name", "")
    text = (
        "Welcome to Writory!\n\n"
        f"Hi {name},\n\n"
        "Please visit the following link to verify your email address:\n"
        f"{url}\n\n"
        "If you didn't create an account, please ignore this email."
    )
    html = (
        "<h2>Welcome to Writory!</h2>"
        f"<p>Hi {name},</p>"
        "<p>Please click the link below to verify your email address:</p>"
        f'<a href="{url}">Verify Email</a>'
        "<p>If you didn't create an account, please ignore this email.</p>"
    )
    return send_email(user["email"], "Verify your Writory account", text, html)


def send_password_reset_email(user: dict, token: str) -> dict:
    url = f"{config.CLIENT_URL}/reset-password?token={token}"
    name = user.get("name", "")
    text = (
        "Password Reset Request\n\n"
        f"Hi {name},\n\n"
        "You requested a password reset. Visit the following link to reset your password:\n"
        f"{url}\n\n"
        "This link will expire in 1 hour.\n\n"
        "If you didn't request this, please ignore this email."
    )
    html = (
        "<h2>Password Reset Request</h2>"
        f"<p>Hi {name},</p>"
        "<p>You requested a password reset. Click the link below to reset your password:</p>"
        f'<a href="{url}">Reset Password</a>'
        "<p>This link will expire in 1 hour.</p>"
        "<p>If you didn't request this, please ignore this email.</p>"
    )
    return send_email(user["email"], "Reset your Writory password", text, html)
