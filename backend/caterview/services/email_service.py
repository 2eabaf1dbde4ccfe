# 메일 발송 서비스 (Outbound Notifier)
# - OTP 메일 본문(HTML) 생성
# - 전송 수단: SMTP(기본), Brevo HTTPS API, 콘솔(개발용)
# - 전송은 블로킹 호출이므로 스레드에서 실행하고 타임아웃을 겁니다.
#   실패는 EmailDeliveryError로 통일하고, 처리 방식은 호출하는 서비스가 결정합니다.
# - 자동 재시도는 하지 않습니다 (복구 경로는 resend-otp)

import asyncio
import logging
import smtplib
from email.mime.text import MIMEText
from email.utils import formataddr

import requests

from ..core.config import Settings, settings
from ..core.exceptions import EmailDeliveryError

# 로거 설정
logger = logging.getLogger(__name__)

OTP_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #2563eb;">{heading}</h2>
  <p>{intro}</p>
  <div style="background-color: #f3f4f6; padding: 15px; text-align: center; margin: 20px 0; font-size: 24px; font-weight: bold; letter-spacing: 2px; color: #1f2937;">
    {code}
  </div>
  <p>This OTP will expire in {minutes} minutes.</p>
  <p>{outro}</p>
  <hr style="border: none; border-top: 1px solid #e5e7eb; margin: 20px 0;">
  <p style="font-size: 12px; color: #6b7280;">This is an automated message, please do not reply.</p>
</div>
"""


def render_verification_email(code: str, minutes: int, app_name: str = "CATerview"):
    subject = f"Verify Your Email - {app_name}"
    html = OTP_TEMPLATE.format(
        heading="Email Verification",
        intro=f"Thank you for registering with {app_name}. Please use the following OTP to verify your email address:",
        code=code,
        minutes=minutes,
        outro="If you didn't request this, please ignore this email.",
    )
    return subject, html


def render_password_reset_email(code: str, minutes: int, app_name: str = "CATerview"):
    subject = f"Password Reset OTP - {app_name}"
    html = OTP_TEMPLATE.format(
        heading="Password Reset Request",
        intro="You have requested to reset your password. Use the following OTP to proceed:",
        code=code,
        minutes=minutes,
        outro="If you didn't request this, please ignore this email and your password will remain unchanged.",
    )
    return subject, html


# ---- 전송 수단 ----

class SmtpEmailSender:
    def __init__(self, config: Settings):
        self.config = config

    def send(self, to_email: str, subject: str, html: str) -> None:
        cfg = self.config
        sender = formataddr((cfg.EMAIL_FROM_NAME, cfg.SMTP_USER or cfg.EMAIL_FROM_ADDRESS))
        msg = MIMEText(html, "html", "utf-8")
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = to_email

        server = smtplib.SMTP(cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=cfg.EMAIL_SEND_TIMEOUT_SECONDS)
        try:
            if cfg.SMTP_TLS:
                server.starttls()
            if cfg.SMTP_USER and cfg.SMTP_PASSWORD:
                server.login(cfg.SMTP_USER, cfg.SMTP_PASSWORD)
            server.sendmail(sender, [to_email], msg.as_string())
        finally:
            server.quit()


class BrevoEmailSender:
    """Brevo 트랜잭션 메일 API (HTTPS). SMTP 포트가 막힌 호스팅 환경에서 사용합니다."""

    def __init__(self, config: Settings):
        self.config = config

    def send(self, to_email: str, subject: str, html: str) -> None:
        cfg = self.config
        if not cfg.BREVO_API_KEY:
            raise EmailDeliveryError(to_email, "BREVO_API_KEY is missing")
        # 복사/붙여넣기 과정에서 섞인 공백이나 따옴표 제거
        api_key = cfg.BREVO_API_KEY.strip().strip("\"'")

        resp = requests.post(
            cfg.BREVO_API_URL,
            headers={
                "accept": "application/json",
                "api-key": api_key,
                "content-type": "application/json",
            },
            json={
                "sender": {"name": cfg.EMAIL_FROM_NAME, "email": cfg.EMAIL_FROM_ADDRESS},
                "to": [{"email": to_email}],
                "subject": subject,
                "htmlContent": html,
            },
            timeout=cfg.EMAIL_SEND_TIMEOUT_SECONDS,
        )
        if not resp.ok:
            try:
                reason = resp.json().get("message") or resp.reason
            except ValueError:
                reason = resp.reason
            raise EmailDeliveryError(to_email, f"Brevo API error {resp.status_code}: {reason}")
        logger.info(f"[Email] Brevo accepted message for {to_email} (id={resp.json().get('messageId')})")


class ConsoleEmailSender:
    """로컬 개발용. 실제로 보내지 않고 제목만 로그로 남깁니다."""

    def send(self, to_email: str, subject: str, html: str) -> None:
        logger.info(f"[Email] (console) to={to_email} subject={subject!r}")


def build_sender(config: Settings):
    # EMAIL_BACKEND 값 자체는 Settings 로드 시 검증됩니다
    if config.EMAIL_BACKEND == "brevo":
        return BrevoEmailSender(config)
    if config.EMAIL_BACKEND == "console":
        return ConsoleEmailSender()
    return SmtpEmailSender(config)


# ---- Notifier ----

class Notifier:
    def __init__(self, sender, config: Settings):
        self.sender = sender
        self.config = config

    async def deliver(self, to_email: str, subject: str, html: str) -> None:
        """메일 한 통을 보냅니다. 실패하면 EmailDeliveryError를 발생시킵니다."""
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.sender.send, to_email, subject, html),
                timeout=self.config.EMAIL_SEND_TIMEOUT_SECONDS,
            )
        except EmailDeliveryError:
            raise
        except asyncio.TimeoutError:
            raise EmailDeliveryError(to_email, f"timed out after {self.config.EMAIL_SEND_TIMEOUT_SECONDS}s")
        except (smtplib.SMTPException, requests.exceptions.RequestException, OSError) as e:
            raise EmailDeliveryError(to_email, str(e)) from e
        logger.info(f"[Email] Sent {subject!r} to {to_email}")

    async def send_verification_otp(self, to_email: str, code: str) -> None:
        subject, html = render_verification_email(code, self.config.OTP_EXPIRE_MINUTES, self.config.EMAIL_FROM_NAME)
        await self.deliver(to_email, subject, html)

    async def send_password_reset_otp(self, to_email: str, code: str) -> None:
        subject, html = render_password_reset_email(code, self.config.OTP_EXPIRE_MINUTES, self.config.EMAIL_FROM_NAME)
        await self.deliver(to_email, subject, html)


def get_notifier() -> Notifier:
    return Notifier(build_sender(settings), settings)
