"""
AWS SES Email Service for sending one-time login and registration codes.

Handles email formatting and AWS SES integration. Callers only see a
boolean: True when the message was accepted, False on any failure.
"""

import logging
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from app.core.config import settings
from app.models.otp_code import OTPPurpose

logger = logging.getLogger(__name__)

SUBJECTS = {
    OTPPurpose.LOGIN.value: "Your CovidVis login code",
    OTPPurpose.REGISTER.value: "Your CovidVis registration code",
}

ACTIONS = {
    OTPPurpose.LOGIN.value: "sign in",
    OTPPurpose.REGISTER.value: "register",
}


class EmailService:
    """
    Service for sending emails via AWS SES.

    When EMAIL_DELIVERY_ENABLED is off (development), nothing is sent and the
    send is reported as successful.
    """

    def __init__(self):
        """Initialize AWS SES client"""
        session_kwargs = {
            'region_name': settings.AWS_REGION,
        }

        # Add credentials if provided (otherwise uses IAM role)
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            session_kwargs['aws_access_key_id'] = settings.AWS_ACCESS_KEY_ID
            session_kwargs['aws_secret_access_key'] = settings.AWS_SECRET_ACCESS_KEY

        self.ses_client = boto3.client('ses', **session_kwargs)

    def send_otp_code(self, email: str, code: str, purpose: str) -> bool:
        """
        Send a one-time code email.

        Args:
            email: Recipient email address
            code: 6-digit code
            purpose: "login" or "register"

        Returns:
            bool: True if email sent successfully, False otherwise
        """
        purpose = purpose.value if isinstance(purpose, OTPPurpose) else purpose

        if not settings.EMAIL_DELIVERY_ENABLED:
            logger.info(
                f"Email delivery disabled; {purpose} code for {email}: {code}",
                extra={"otp_code": code}
            )
            return True

        subject = SUBJECTS.get(purpose, SUBJECTS[OTPPurpose.LOGIN.value])
        html_body = self._build_otp_html(email, code, purpose)
        text_body = self._build_otp_text(email, code, purpose)

        try:
            response = self.ses_client.send_email(
                Source=f"{settings.AWS_SES_FROM_NAME} <{settings.AWS_SES_FROM_EMAIL}>",
                Destination={'ToAddresses': [email]},
                Message={
                    'Subject': {'Data': subject, 'Charset': 'UTF-8'},
                    'Body': {
                        'Html': {'Data': html_body, 'Charset': 'UTF-8'},
                        'Text': {'Data': text_body, 'Charset': 'UTF-8'}
                    }
                }
            )

            message_id = response.get('MessageId')
            logger.info(f"OTP email ({purpose}) sent to {email} (MessageId: {message_id})")
            return True

        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            logger.error(f"AWS SES ClientError: {error_code} - {error_message}")

            if error_code == 'MessageRejected':
                logger.error(f"Email rejected: {error_message}")
            elif error_code == 'MailFromDomainNotVerified':
                logger.error("Sender email not verified in SES")

            return False

        except BotoCoreError as e:
            logger.error(f"AWS BotoCoreError: {str(e)}")
            return False

        except Exception as e:
            logger.error(f"Unexpected error sending email: {str(e)}")
            return False

    def _build_otp_html(self, email: str, code: str, purpose: str) -> str:
        """Build HTML email body for a one-time code."""
        action = ACTIONS.get(purpose, "sign in")
        minutes = settings.OTP_EXPIRE_MINUTES

        return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Your verification code</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f4f4f4;">
    <table role="presentation" style="width: 100%; border-collapse: collapse;">
        <tr>
            <td align="center" style="padding: 40px 0;">
                <table role="presentation" style="width: 600px; border-collapse: collapse; background-color: #ffffff; border-radius: 8px;">
                    <tr>
                        <td style="padding: 40px 40px 20px 40px; text-align: center;">
                            <h1 style="margin: 0; color: #333333; font-size: 28px;">Your {action} code</h1>
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 0 40px 40px 40px;">
                            <p style="margin: 0 0 30px 0; color: #666666; font-size: 16px;">
                                Someone is trying to {action} with <strong>{email}</strong>. Use this code:
                            </p>
                            <div style="background-color: #f8f9fa; border-radius: 8px; padding: 30px; text-align: center; margin: 0 0 30px 0;">
                                <div style="font-size: 36px; font-weight: 700; letter-spacing: 8px; color: #667eea; font-family: 'Courier New', monospace;">
                                    {code}
                                </div>
                            </div>
                            <p style="margin: 0 0 20px 0; color: #666666; font-size: 14px;">
                                This code expires in <strong>{minutes} minutes</strong>. Never share it with anyone.
                            </p>
                            <p style="margin: 0; color: #999999; font-size: 13px;">
                                If this wasn't you, you can safely ignore this email.
                            </p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
"""

    def _build_otp_text(self, email: str, code: str, purpose: str) -> str:
        """Build plain text email body (fallback)."""
        action = ACTIONS.get(purpose, "sign in")
        return f"""Someone is trying to {action} with {email}.

Your code: {code}

This code expires in {settings.OTP_EXPIRE_MINUTES} minutes. Never share it with anyone.

If this wasn't you, you can safely ignore this email.
"""


# Singleton instance
email_service = EmailService()
