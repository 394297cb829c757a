"""
Notification service.

Delivers password reset codes and notices by email (SendGrid)
and SMS (Twilio). Delivery is fire-and-forget: failures are logged and
reported in the returned dict, never raised.
"""

import logging
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from twilio.rest import Client as TwilioClient

from ..config import NotificationConfig

logger = logging.getLogger(__name__)


class NotificationService:
    """Sends account notifications via SendGrid and Twilio."""

    def __init__(
        self,
        config: Optional[NotificationConfig] = None,
        email_client=None,
        sms_client=None
    ):
        """
        Initialize notification service.

        Args:
            config: Credentials (loads from env if not provided)
            email_client: Prebuilt SendGrid client, mainly for tests
            sms_client: Prebuilt Twilio client, mainly for tests
        """
        self.config = config or NotificationConfig()
        self._email_client = email_client
        self._sms_client = sms_client

        if self._email_client is None and self.config.sendgrid_api_key:
            self._email_client = SendGridAPIClient(self.config.sendgrid_api_key)
            logger.info("SendGrid email service initialized")

        if self._sms_client is None and self.config.twilio_account_sid and self.config.twilio_auth_token:
            try:
                self._sms_client = TwilioClient(
                    self.config.twilio_account_sid,
                    self.config.twilio_auth_token
                )
                logger.info("Twilio SMS service initialized")
            except Exception as e:
                logger.error(f"Failed to initialize Twilio: {e}")

    def is_email_configured(self) -> bool:
        return self._email_client is not None and bool(self.config.mail_from)

    def is_sms_configured(self) -> bool:
        return self._sms_client is not None and bool(self.config.twilio_phone_number)

    def format_phone(self, phone: str) -> str:
        """
        Format a mobile number to E.164.

        Input examples (default country code "1"):
            - "(506) 756-8493" -> "+15067568493"
            - "+44 20 7946 0958" -> "+442079460958"
        """
        digits = "".join(filter(str.isdigit, phone))
        if phone.strip().startswith("+"):
            return "+" + digits
        return "+" + self.config.sms_default_country_code + digits

    def send_email(self, to_email: str, subject: str, html_content: str) -> dict:
        """
        Send a single email.

        Returns:
            Dict with success status and provider status code or error
        """
        if not self.is_email_configured():
            logger.warning("SendGrid not configured, skipping email")
            return {"success": False, "error": "SendGrid not configured"}

        message = Mail(
            from_email=self.config.mail_from,
            to_emails=to_email,
            subject=subject,
            html_content=html_content
        )

        try:
            response = self._email_client.send(message)
            logger.info(f"Email '{subject}' sent to {to_email}: {response.status_code}")
            return {"success": True, "status_code": response.status_code}
        except Exception as e:
            logger.error(f"Email send failed to {to_email}: {e}")
            return {"success": False, "error": str(e)}

    def send_sms(self, to_phone: str, body: str) -> dict:
        """
        Send a single SMS.

        Returns:
            Dict with success status and message SID or error
        """
        if not self.is_sms_configured():
            logger.warning("Twilio not configured, skipping SMS")
            return {"success": False, "error": "Twilio not configured"}

        to_formatted = self.format_phone(to_phone)

        try:
            message = self._sms_client.messages.create(
                body=body,
                from_=self.config.twilio_phone_number,
                to=to_formatted
            )
            logger.info(f"SMS sent successfully to {to_formatted}: {message.sid}")
            return {"success": True, "sid": message.sid}
        except Exception as e:
            logger.error(f"SMS send failed to {to_formatted}: {e}")
            return {"success": False, "error": str(e)}

    def send_reset_code(
        self,
        email: Optional[str],
        mobile_no: Optional[str],
        code: str,
        expire_minutes: int,
        via_email: bool = True,
        via_sms: bool = False
    ) -> dict:
        """
        Deliver a password reset code over the enabled channels.

        Returns:
            Dict keyed by channel ("email", "sms") with each send result
        """
        results = {}

        if via_email and email:
            results["email"] = self.send_email(
                to_email=email,
                subject="Reset your password",
                html_content=(
                    "<p>Use the code below to reset your password.</p>"
                    f"<h2>{code}</h2>"
                    f"<p>The code expires in {expire_minutes} minutes.</p>"
                )
            )

        if via_sms and mobile_no:
            results["sms"] = self.send_sms(
                to_phone=mobile_no,
                body=f"Your password reset code is {code}. It expires in {expire_minutes} minutes."
            )

        if not results:
            logger.warning("No delivery channel available for reset code")

        return results

    def send_password_changed(self, email: Optional[str], name: Optional[str] = None) -> dict:
        """Tell the account owner their password was reset."""
        if not email:
            return {"success": False, "error": "No email address"}

        greeting = f"Hi {name}," if name else "Hi,"
        return self.send_email(
            to_email=email,
            subject="Your password has been reset",
            html_content=(
                f"<p>{greeting}</p>"
                "<p>Your password was reset successfully. "
                "If this wasn't you, contact support right away.</p>"
            )
        )
