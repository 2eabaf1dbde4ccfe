# 인증 라우터
# - 회원가입: POST /api/v1/auth/register
# - OTP 검증: POST /api/v1/auth/verify-otp
# - OTP 재발송: POST /api/v1/auth/resend-otp
# - 로그인: POST /api/v1/auth/login
# - 비밀번호 찾기/재설정: POST /api/v1/auth/forgot-password, /reset-password

from fastapi import APIRouter, Depends

from ...schemas.user_schema import (
    AuthResult,
    EmailRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from ...services.auth_service import AuthService, get_auth_service

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=RegisterResponse, summary="회원가입 + 인증 OTP 메일 발송")
async def register(payload: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    return await service.register(payload.name, payload.email, payload.password)

@router.post("/verify-otp", response_model=VerifyOtpResponse, summary="OTP 검증 후 계정 활성화 (토큰 발급)")
async def verify_otp(payload: VerifyOtpRequest, service: AuthService = Depends(get_auth_service)):
    return await service.verify_otp(payload.email, payload.otp)

@router.post("/resend-otp", response_model=MessageResponse, summary="인증 OTP 재발송")
async def resend_otp(payload: EmailRequest, service: AuthService = Depends(get_auth_service)):
    return await service.resend_otp(payload.email)

@router.post("/login", response_model=AuthResult, summary="로그인 (JWT 토큰 발급)")
async def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return await service.login(payload.email, payload.password)

@router.post("/forgot-password", response_model=MessageResponse, summary="비밀번호 재설정 OTP 발송")
async def forgot_password(payload: EmailRequest, service: AuthService = Depends(get_auth_service)):
    return await service.forgot_password(payload.email)

@router.post("/reset-password", response_model=MessageResponse, summary="OTP로 비밀번호 재설정")
async def reset_password(payload: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    return await service.reset_password(payload.email, payload.otp, payload.new_password)
