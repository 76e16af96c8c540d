"""Notification service (Mailgun/SendGrid email)."""
import logging
from datetime import datetime, timezone

from app.config import get_settings
from app.models.password_reset import RESET_CODE_EXPIRE_MINUTES

log = logging.getLogger("uvicorn.error")

MAILGUN_US_BASE = "https://api.mailgun.net"
MAILGUN_EU_BASE = "https://api.eu.mailgun.net"


def send_email(to_email: str, subject: str, html_content: str, text_content: str | None = None) -> bool:
    """Send email via Mailgun (preferred) or SendGrid. Returns True if the provider accepted it."""
    settings = get_settings()
    if settings.mailgun_api_key and settings.mailgun_domain:
        return _send_email_mailgun(to_email, subject, html_content, text_content=text_content, settings=settings)
    if settings.sendgrid_api_key:
        return _send_email_sendgrid(to_email, subject, html_content, text_content=text_content, settings=settings)
    log.warning(
        "[Email] NOT SENT: to=%s subject=%s. Set MAILGUN_API_KEY and MAILGUN_DOMAIN (or SENDGRID_API_KEY) in .env.",
        to_email,
        subject,
    )
    return False


def _send_email_mailgun(to_email: str, subject: str, html_content: str, text_content: str | None = None, settings=None) -> bool:
    if settings is None:
        settings = get_settings()
    try:
        import httpx

        base = (settings.mailgun_base_url or MAILGUN_US_BASE).strip().rstrip("/")
        domain = (settings.mailgun_domain or "").strip().lower()
        from_addr = (settings.mailgun_from_email or "").strip()
        from_domain = from_addr.split("@")[-1].lower() if "@" in from_addr else ""
        if domain and from_domain != domain:
            # Mailgun drops mail whose sender domain differs from the sending domain
            from_addr = f"noreply@{domain}"
        data = {
            "from": f"{settings.mailgun_from_name} <{from_addr}>",
            "to": to_email,
            "subject": subject,
            "text": text_content or "",
            "html": html_content or "",
        }
        with httpx.Client(timeout=10.0) as client:
            r = client.post(f"{base}/v3/{domain}/messages", auth=("api", settings.mailgun_api_key), data=data)
            if 200 <= r.status_code < 300:
                log.info("[Mailgun] sent: to=%s status=%s", to_email, r.status_code)
                return True
            if r.status_code == 401 and base == MAILGUN_US_BASE:
                log.info("[Mailgun] 401 with US endpoint, retrying with EU endpoint")
                r2 = client.post(f"{MAILGUN_EU_BASE}/v3/{domain}/messages", auth=("api", settings.mailgun_api_key), data=data)
                if 200 <= r2.status_code < 300:
                    log.info("[Mailgun] sent (EU): to=%s", to_email)
                    return True
                log.warning("[Mailgun] EU request failed: status=%s body=%s", r2.status_code, r2.text[:500])
                return False
            log.warning("[Mailgun] API failed: status=%s to=%s body=%s", r.status_code, to_email, r.text[:500])
            return False
    except Exception as e:
        log.warning("[Mailgun] Exception: to=%s error=%s: %s", to_email, type(e).__name__, e)
        return False


def _send_email_sendgrid(to_email: str, subject: str, html_content: str, text_content: str | None = None, settings=None) -> bool:
    if settings is None:
        settings = get_settings()
    try:
        from sendgrid import SendGridAPIClient
        from sendgrid.helpers.mail import Mail

        message = Mail(
            from_email=(settings.sendgrid_from_email, settings.sendgrid_from_name),
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
            plain_text_content=text_content or "",
        )
        sg = SendGridAPIClient(settings.sendgrid_api_key)
        sg.send(message)
        return True
    except Exception as e:
        log.warning("[SendGrid] Exception: to=%s error=%s: %s", to_email, type(e).__name__, e)
        return False


_EMAIL_STYLE = """
      body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
      .container { max-width: 600px; margin: 0 auto; padding: 20px; }
      .header { background: #2563eb; color: white; padding: 20px; text-align: center; }
      .content { padding: 20px; background: #f9fafb; }
      .code { font-size: 32px; font-weight: bold; text-align: center; background: white;
              padding: 20px; margin: 20px 0; letter-spacing: 5px; color: #2563eb; }
      .button { display: inline-block; padding: 12px 24px; background: #2563eb;
                color: white; text-decoration: none; border-radius: 6px; margin: 20px 0; }
      .footer { text-align: center; color: #6b7280; font-size: 14px; padding: 20px; }
"""


def _wrap_html(title: str, body: str) -> str:
    year = datetime.now(timezone.utc).year
    return f"""<!DOCTYPE html>
<html>
  <head><style>{_EMAIL_STYLE}</style></head>
  <body>
    <div class="container">
      <div class="header"><h1>{title}</h1></div>
      <div class="content">{body}</div>
      <div class="footer"><p>&copy; {year} KickBack. All rights reserved.</p></div>
    </div>
  </body>
</html>
"""


def send_password_reset_email(to_email: str, code: str) -> bool:
    """Send the 6-digit password reset code."""
    subject = "Reset Your KickBack Password"
    text = (
        f"Your KickBack password reset code is: {code}. "
        f"It expires in {RESET_CODE_EXPIRE_MINUTES} minutes. If you didn't request this, please ignore this email."
    )
    html = _wrap_html(
        "Reset Your Password",
        f"""
        <p>Hi there,</p>
        <p>You recently requested to reset your password for your KickBack account.</p>
        <p>Use the verification code below to reset your password:</p>
        <div class="code">{code}</div>
        <p><strong>This code expires in {RESET_CODE_EXPIRE_MINUTES} minutes.</strong></p>
        <p>If you didn't request this, please ignore this email.</p>
        """,
    )
    return send_email(to_email, subject, html, text_content=text)


def send_welcome_email(to_email: str, first_name: str | None = None) -> bool:
    """Send welcome email after signup."""
    name = (first_name or "").strip() or "there"
    url = get_settings().frontend_url
    subject = "Welcome to KickBack!"
    text = (
        f"Hi {name}, welcome to KickBack - your premium sneaker cleaning service! "
        f"Book a Bronze, Silver or Gold clean and track your orders at {url}."
    )
    html = _wrap_html(
        "Welcome to KickBack!",
        f"""
        <p>Hi {name},</p>
        <p>Welcome to KickBack - your premium sneaker cleaning service!</p>
        <p>We're excited to help keep your sneakers looking fresh. Here's what you can do:</p>
        <ul>
          <li>Book cleaning services with just a few clicks</li>
          <li>Track your orders in real-time</li>
          <li>Choose from Bronze, Silver, or Gold service tiers</li>
          <li>Schedule convenient pickup and delivery times</li>
        </ul>
        <p style="text-align: center;"><a href="{url}" class="button">Get Started</a></p>
        """,
    )
    return send_email(to_email, subject, html, text_content=text)
