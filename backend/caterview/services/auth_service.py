# 인증 서비스 레이어
# - 회원가입 (미인증 계정은 같은 이메일로 재가입 시 덮어쓰기) + OTP 발송
# - OTP 검증 → 계정 활성화 → 세션 토큰 발급
# - OTP 재발송, 로그인
# - 비밀번호 찾기(계정 존재 여부를 드러내지 않음) / 재설정

import logging
from fastapi import Depends

from ..core.clock import SystemClock, get_clock
from ..core.config import Settings, settings
from ..core.exceptions import (
    Conflict,
    EmailDeliveryError,
    InvalidInput,
    NotFound,
    ServiceError,
    Unauthorized,
)
from ..core.otp import OtpGenerator
from ..core.security import TokenIssuer, get_password_hash, get_token_issuer, verify_password
from ..repositories.user_repository import UserRepository, get_user_repository
from ..schemas.user_schema import AccountSummary, AuthResult, MessageResponse, RegisterResponse, VerifyOtpResponse
from .email_service import Notifier, get_notifier

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If your email is registered, you will receive an OTP"
INVALID_OTP_MESSAGE = "Invalid or expired OTP"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def account_summary(user) -> AccountSummary:
    role = getattr(user.role, "value", user.role)
    return AccountSummary(id=str(user.id), name=user.name, email=user.email, role=role)


class AuthService:
    def __init__(
        self,
        repo: UserRepository,
        notifier: Notifier,
        tokens: TokenIssuer,
        clock=None,
        config: Settings = settings,
        otp: OtpGenerator = None,
    ):
        self.repo = repo
        self.notifier = notifier
        self.tokens = tokens
        self.clock = clock or SystemClock()
        self.config = config
        self.otp = otp or OtpGenerator(config.OTP_LENGTH, config.OTP_EXPIRE_MINUTES)

    def _check_password_strength(self, password: str) -> None:
        if len(password) < self.config.MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"Password must be at least {self.config.MIN_PASSWORD_LENGTH} characters long")

    def _issue_token(self, user) -> str:
        role = getattr(user.role, "value", user.role)
        return self.tokens.issue(str(user.id), role)

    async def _send_verification(self, email: str, code: str) -> None:
        # 사용자는 이 메일 없이는 인증을 진행할 수 없으므로 실패는 호출자에게 알립니다.
        # 발급된 OTP는 롤백하지 않습니다 (resend-otp로 복구)
        try:
            await self.notifier.send_verification_otp(email, code)
        except EmailDeliveryError as e:
            logger.error(f"[AuthService] Verification email failed for {email}: {e.reason}")
            raise ServiceError("Failed to send verification email")

    async def register(self, name: str, email: str, password: str) -> RegisterResponse:
        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email or not password:
            raise InvalidInput("Missing required fields")
        self._check_password_strength(password)

        existing = await self.repo.get_by_email(email)
        if existing and existing.is_verified:
            raise Conflict("Email already registered")

        now = self.clock.now()
        code = self.otp.generate()
        expires = self.otp.expiry_from(now)
        hashed = get_password_hash(password)

        if existing:
            user = await self.repo.reissue_unverified(email, name, hashed, code, expires, now)
            if user is None:
                # 조회와 갱신 사이에 인증이 완료된 경우
                raise Conflict("Email already registered")
            logger.info(f"[AuthService] Re-issued registration OTP for unverified account {user.id}")
        else:
            user = await self.repo.create(name, email, hashed, code, expires, now)
            logger.info(f"[AuthService] Created account {user.id}")

        await self._send_verification(email, code)
        return RegisterResponse(message="Verification OTP sent to your email", email=email)

    async def verify_otp(self, email: str, otp: str) -> VerifyOtpResponse:
        email = normalize_email(email)
        if not email or not otp:
            raise InvalidInput("Email and OTP are required")

        existing = await self.repo.get_by_email(email)
        if not existing:
            raise NotFound("User not found")

        # 코드 확인과 삭제를 한 번의 조건부 갱신으로 처리합니다
        user = await self.repo.consume_registration_otp(email, otp, self.clock.now())
        if user is None:
            raise InvalidInput(INVALID_OTP_MESSAGE)

        logger.info(f"[AuthService] Account {user.id} verified")
        return VerifyOtpResponse(
            message="Email verified successfully",
            user=account_summary(user),
            token=self._issue_token(user),
        )

    async def resend_otp(self, email: str) -> MessageResponse:
        email = normalize_email(email)
        if not email:
            raise InvalidInput("Email is required")

        existing = await self.repo.get_by_email(email)
        if not existing:
            raise NotFound("User not found")
        if existing.is_verified:
            raise Conflict("Email already verified")

        now = self.clock.now()
        code = self.otp.generate()
        user = await self.repo.set_registration_otp(email, code, self.otp.expiry_from(now), now)
        if user is None:
            raise Conflict("Email already verified")

        await self._send_verification(email, code)
        return MessageResponse(message="New OTP sent to your email")

    async def login(self, email: str, password: str) -> AuthResult:
        email = normalize_email(email)
        if not email or not password:
            raise InvalidInput("Missing required fields")

        user = await self.repo.get_by_email(email)
        if not user or not user.is_verified:
            raise Unauthorized("Invalid credentials or unverified account")
        if not verify_password(password, user.hashed_password):
            raise Unauthorized("Invalid credentials")

        return AuthResult(user=account_summary(user), token=self._issue_token(user))

    async def forgot_password(self, email: str) -> MessageResponse:
        email = normalize_email(email)
        user = await self.repo.get_by_email(email) if email else None
        if user:
            now = self.clock.now()
            code = self.otp.generate()
            await self.repo.set_reset_otp(email, code, self.otp.expiry_from(now), now)
            try:
                await self.notifier.send_password_reset_otp(email, code)
            except EmailDeliveryError as e:
                # 응답 모양을 바꾸면 계정 존재 여부가 드러나므로 로그만 남깁니다
                logger.error(f"[AuthService] Password reset email failed for account {user.id}: {e.reason}")

        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    async def reset_password(self, email: str, otp: str, new_password: str) -> MessageResponse:
        self._check_password_strength(new_password or "")
        email = normalize_email(email)
        if not email or not otp:
            raise InvalidInput(INVALID_OTP_MESSAGE)

        hashed = get_password_hash(new_password)
        user = await self.repo.consume_reset_otp(email, otp, hashed, self.clock.now())
        if user is None:
            raise InvalidInput(INVALID_OTP_MESSAGE)

        logger.info(f"[AuthService] Password reset for account {user.id}")
        return MessageResponse(message="Password has been reset successfully")


def get_auth_service(
    repo: UserRepository = Depends(get_user_repository),
    notifier: Notifier = Depends(get_notifier),
    tokens: TokenIssuer = Depends(get_token_issuer),
    clock: SystemClock = Depends(get_clock),
) -> AuthService:
    return AuthService(repo, notifier, tokens, clock, settings)
