import enum
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape, unescape
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailTemplate(str, enum.Enum):
    WELCOME = "welcome"
    APPROVAL = "approval"
    REJECTION = "rejection"
    PASSWORD_RESET = "password_reset"
    PASSWORD_CHANGED = "password_changed"
    ADMIN_WELCOME = "admin_welcome"
    ADMIN_PASSWORD_CHANGED = "admin_password_changed"
    CONTACT = "contact"


DEFAULT_REJECTION_REASON = "Application did not meet the required criteria"

ROLE_LABELS = {
    "super_admin": "Super Administrator",
    "membership_admin": "Membership Administrator",
    "content_admin": "Content Administrator",
}


def escape_variables(variables: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Template variables come from applicants and visitors; escape them before they go into HTML."""
    return {
        key: escape(value) if isinstance(value, str) else value
        for key, value in (variables or {}).items()
    }


def _wrap(body: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        {body}
    </div>
    """


class EmailService:
    """Outbound notification gateway. Sending never raises; callers get a success flag."""

    def __init__(self):
        self.smtp_server = settings.SMTP_SERVER
        self.smtp_port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self._renderers: Dict[EmailTemplate, Callable[..., Tuple[str, str]]] = {
            EmailTemplate.WELCOME: self._render_welcome,
            EmailTemplate.APPROVAL: self._render_approval,
            EmailTemplate.REJECTION: self._render_rejection,
            EmailTemplate.PASSWORD_RESET: self._render_password_reset,
            EmailTemplate.PASSWORD_CHANGED: self._render_password_changed,
            EmailTemplate.ADMIN_WELCOME: self._render_admin_welcome,
            EmailTemplate.ADMIN_PASSWORD_CHANGED: self._render_admin_password_changed,
            EmailTemplate.CONTACT: self._render_contact,
        }

    def send_email(
        self,
        to_emails: List[str],
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Send email over SMTP"""

        if not settings.SEND_EMAILS:
            logger.info(f"Email sending disabled. Would send: {subject} to {to_emails}")
            return True

        try:
            message = MIMEMultipart("alternative")
            message["Subject"] = subject
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = ", ".join(to_emails)
            if reply_to:
                message["Reply-To"] = reply_to

            if text_content:
                message.attach(MIMEText(text_content, "plain"))
            message.attach(MIMEText(html_content, "html"))

            context = ssl.create_default_context()

            with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=settings.EMAIL_TIMEOUT) as server:
                server.starttls(context=context)
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(self.from_email, to_emails, message.as_string())

            logger.info(f"Email sent successfully to {to_emails}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email '{subject}' to {to_emails}: {str(e)}")
            return False

    def send(self, template: EmailTemplate, recipient: str, variables: Optional[Dict[str, Any]] = None,
             reply_to: Optional[str] = None) -> bool:
        """Render a template and send it. Returns False instead of raising on any failure."""
        try:
            renderer = self._renderers[EmailTemplate(template)]
            subject, html_content = renderer(**escape_variables(variables))
        except Exception as e:
            logger.error(f"Failed to render {template} email for {recipient}: {str(e)}")
            return False
        return self.send_email([recipient], subject, html_content, reply_to=reply_to)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def _render_welcome(self, first_name: str, last_name: str, membership_number: str,
                        temp_password: str) -> Tuple[str, str]:
        html = _wrap(f"""
        <h2 style="color: #2c3e50; border-bottom: 2px solid #007bff; padding-bottom: 10px;">
            Welcome to the Nigerian Association of Urological Surgeons
        </h2>
        <p>Dear Dr. {first_name} {last_name},</p>
        <p>Your NAUS member account has been created. You can now access your member dashboard
        to update your profile and manage your membership.</p>
        <div style="background-color: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #2c3e50;">Your Login Credentials:</h3>
            <p><strong>Membership Number:</strong> {membership_number}</p>
            <p><strong>Temporary Password:</strong> {temp_password}</p>
        </div>
        <p style="color: #dc3545; font-weight: bold;">
            Please change your password after your first login for security.
        </p>
        <div style="margin: 30px 0; text-align: center;">
            <a href="{settings.FRONTEND_URL}/member-login"
               style="background-color: #28a745; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; display: inline-block;">
                Login to Your Account
            </a>
        </div>
        <p>If you have any questions, please contact us at {settings.CONTACT_EMAIL}</p>
        <p>Best regards,<br>NAUS Administration</p>
        """)
        return "Welcome to NAUS - Your Account Has Been Created", html

    def _render_approval(self, membership_number: str, temp_password: str,
                         first_name: Optional[str] = None) -> Tuple[str, str]:
        greeting = f"Dr. {first_name}" if first_name else "Applicant"
        html = _wrap(f"""
        <h2 style="color: #2c3e50;">Congratulations! Your NAUS Membership Application Has Been Approved</h2>
        <p>Dear {greeting},</p>
        <p>We are pleased to inform you that your membership application has been approved by the Executive Committee.</p>
        <div style="background-color: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">
            <p><strong>Your Membership Number:</strong> <span style="color: #007bff; font-size: 18px;">{membership_number}</span></p>
            <p><strong>Temporary Password:</strong> <span style="color: #28a745; font-size: 16px;">{temp_password}</span></p>
        </div>
        <p>Please use this information to log in to your account and <strong>change your password immediately</strong>.</p>
        <p style="margin: 30px 0; text-align: center;">
            <a href="{settings.FRONTEND_URL}/member-login"
               style="background-color: #007bff; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; display: inline-block;">Click here to log in</a>
        </p>
        <p>Best regards,<br><strong>NAUS Executive Committee</strong></p>
        """)
        return "NAUS Membership Application Approved", html

    def _render_rejection(self, reason: Optional[str] = None) -> Tuple[str, str]:
        reason = reason or DEFAULT_REJECTION_REASON
        html = _wrap(f"""
        <h2 style="color: #2c3e50;">NAUS Membership Application Update</h2>
        <p>Dear Applicant,</p>
        <p>Thank you for your interest in joining the Nigerian Association of Urological Surgeons.</p>
        <p>After careful review by our Executive Committee, we regret to inform you that your
        membership application has not been approved at this time.</p>
        <div style="background-color: #fff3cd; padding: 15px; border-left: 4px solid #ffc107; margin: 20px 0;">
            <p style="margin: 0;"><strong>Reason:</strong> {reason}</p>
        </div>
        <p>If you believe this decision was made in error, please contact our office at
        <a href="mailto:{settings.CONTACT_EMAIL}">{settings.CONTACT_EMAIL}</a>.</p>
        <p>You may reapply for membership once you have addressed the concerns outlined above.</p>
        <p>Best regards,<br><strong>NAUS Executive Committee</strong></p>
        """)
        return "NAUS Membership Application Status Update", html

    def _render_password_reset(self, reset_token: str, reset_path: str = "/reset-password") -> Tuple[str, str]:
        base_url = settings.ADMIN_URL if reset_path.startswith("/admin") else settings.FRONTEND_URL
        reset_url = f"{base_url}{reset_path}/{reset_token}"
        minutes = settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
        html = _wrap(f"""
        <h2 style="color: #2c3e50; border-bottom: 2px solid #007bff; padding-bottom: 10px;">Password Reset Request</h2>
        <p>Hello,</p>
        <p>We received a request to reset the password for your NAUS account.</p>
        <div style="margin: 30px 0; text-align: center;">
            <a href="{reset_url}"
               style="background-color: #007bff; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; display: inline-block;">
                Reset Password
            </a>
        </div>
        <p style="color: #666; font-size: 14px;">This link will expire in {minutes} minutes for security reasons.</p>
        <p style="color: #666; font-size: 14px;">
            If you did not request a password reset, please ignore this email. Your password will remain unchanged.
        </p>
        <p style="color: #999; font-size: 12px;">
            If the button doesn't work, copy and paste this link into your browser:<br>
            <a href="{reset_url}" style="color: #007bff;">{reset_url}</a>
        </p>
        <p>Best regards,<br><strong>NAUS Security Team</strong></p>
        """)
        return "NAUS - Password Reset Request", html

    def _render_password_changed(self) -> Tuple[str, str]:
        html = _wrap("""
        <h2 style="color: #2c3e50;">Password Changed Successfully</h2>
        <p>Hello,</p>
        <p>Your password has been successfully changed.</p>
        <p>If you did not make this change, please contact us immediately.</p>
        <p>Best regards,<br>NAUS Security Team</p>
        """)
        return "Password Changed Successfully", html

    def _render_admin_welcome(self, name: str, role: str, temp_password: str) -> Tuple[str, str]:
        role_label = ROLE_LABELS.get(role, role)
        html = _wrap(f"""
        <h2 style="color: #2c3e50; border-bottom: 2px solid #007bff; padding-bottom: 10px;">
            Welcome to the NAUS Admin Portal
        </h2>
        <p>Dear {name},</p>
        <p>An administrator account has been created for you with the role <strong>{role_label}</strong>.</p>
        <div style="background-color: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">
            <p><strong>Login URL:</strong> <a href="{settings.ADMIN_URL}">{settings.ADMIN_URL}</a></p>
            <p><strong>Temporary Password:</strong> {temp_password}</p>
        </div>
        <p style="color: #dc3545; font-weight: bold;">Please change your password after your first login.</p>
        <p>If you have any questions, contact {settings.CONTACT_EMAIL}.</p>
        <p>Best regards,<br>NAUS Administration</p>
        """)
        return "Your NAUS Admin Account", html

    def _render_admin_password_changed(self, name: str, new_password: str) -> Tuple[str, str]:
        html = _wrap(f"""
        <h2 style="color: #2c3e50;">Your Admin Password Was Reset</h2>
        <p>Dear {name},</p>
        <p>A super administrator has reset the password for your NAUS admin account.</p>
        <div style="background-color: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">
            <p><strong>New Password:</strong> {new_password}</p>
        </div>
        <p>Please log in at <a href="{settings.ADMIN_URL}">{settings.ADMIN_URL}</a> and change it immediately.</p>
        <p>Best regards,<br>NAUS Security Team</p>
        """)
        return "NAUS Admin Password Reset", html

    def _render_contact(self, name: str, email: str, message: str,
                        subject: Optional[str] = None) -> Tuple[str, str]:
        subject = subject or "No Subject"
        html = _wrap(f"""
        <h2 style="color: #2c3e50; border-bottom: 2px solid #007bff; padding-bottom: 10px;">New Contact Form Submission</h2>
        <div style="background-color: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">
            <p><strong>From:</strong> {name}</p>
            <p><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>
            <p><strong>Subject:</strong> {subject}</p>
        </div>
        <div style="background-color: #fff; padding: 20px; border: 1px solid #ddd; border-radius: 5px;">
            <h3 style="color: #2c3e50; margin-top: 0;">Message:</h3>
            <p style="white-space: pre-wrap;">{message}</p>
        </div>
        """)
        return f"Contact Form: {unescape(subject)}", html


email_service = EmailService()
